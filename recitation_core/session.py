"""
RecitationSession: owns the reference passage, the match cursor, the
confirmed-word history and the revision state for one recitation attempt.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .passage import ReferenceToken
from .transcript_aligner import (
    Confirmation,
    HypothesisSegment,
    MatchCursor,
    RevisionState,
    align_segment,
)

logger = logging.getLogger(__name__)


class RecitationSession:
    """
    Progress tracker for reciting a fixed passage from memory.

    The confirmed history is append-only and always equals the first
    ``cursor.confirmed_count`` reference tokens. It is only cleared by
    ``reset``, never by stopping or restarting recognition.
    """

    def __init__(
        self,
        reference_tokens: Optional[list[ReferenceToken]] = None,
        on_complete: Optional[Callable[["RecitationSession"], None]] = None,
    ):
        self.on_complete = on_complete
        self.reference_tokens: list[ReferenceToken] = []
        self.cursor = MatchCursor()
        self.revision = RevisionState()
        self.confirmations: list[Confirmation] = []
        self._completion_fired = False
        self.reset(reference_tokens or [])

    def reset(self, reference_tokens: list[ReferenceToken]) -> None:
        """Replace the passage and discard all progress."""
        self.reference_tokens = list(reference_tokens)
        self.cursor = MatchCursor()
        self.revision = RevisionState()
        self.confirmations = []
        self._completion_fired = False
        logger.info("Session reset with %d reference words", len(self.reference_tokens))

    def restart_revisions(self) -> None:
        """Forget the open utterance; a new recognition run numbers results from scratch."""
        self.revision.clear()

    # -------------------------------------------------------------------------
    def on_hypothesis_segment(self, segment: HypothesisSegment) -> list[ReferenceToken]:
        """Feed one hypothesis segment; return the newly confirmed tokens."""
        if self.is_complete:
            return []

        new = align_segment(segment, self.reference_tokens, self.cursor, self.revision)
        self.confirmations.extend(new)

        if self.is_complete and not self._completion_fired:
            self._completion_fired = True
            logger.info("Passage complete (%d words)", len(self.reference_tokens))
            if self.on_complete is not None:
                self.on_complete(self)

        return [c.token for c in new]

    # -------------------------------------------------------------------------
    @property
    def confirmed_count(self) -> int:
        return self.cursor.confirmed_count

    @property
    def confirmed_tokens(self) -> list[ReferenceToken]:
        return self.reference_tokens[:self.cursor.confirmed_count]

    @property
    def is_complete(self) -> bool:
        return bool(self.reference_tokens) and self.cursor.confirmed_count >= len(self.reference_tokens)

    def progress_fraction(self) -> float:
        return self.cursor.confirmed_count / max(1, len(self.reference_tokens))

    def confirmed_grouped_by_verse(self) -> list[tuple[int, list[ReferenceToken]]]:
        """Contiguous runs of confirmed tokens sharing a verse, in cursor order."""
        groups: list[tuple[int, list[ReferenceToken]]] = []
        for token in self.confirmed_tokens:
            if not groups or groups[-1][0] != token.verse_index:
                groups.append((token.verse_index, []))
            groups[-1][1].append(token)
        return groups

    def current_verse(self) -> Optional[int]:
        """Verse of the next unconfirmed token, or None if complete or empty."""
        if self.cursor.confirmed_count >= len(self.reference_tokens):
            return None
        return self.reference_tokens[self.cursor.confirmed_count].verse_index

    def summary(self) -> dict:
        """JSON-serialisable snapshot of progress."""
        return {
            "total_words": len(self.reference_tokens),
            "confirmed_words": self.cursor.confirmed_count,
            "progress": round(self.progress_fraction(), 4),
            "complete": self.is_complete,
            "current_verse": self.current_verse(),
            "verses": [
                {
                    "verse": verse,
                    "text": " ".join(t.display_text for t in tokens),
                }
                for verse, tokens in self.confirmed_grouped_by_verse()
            ],
            "match_kinds": [c.kind.value for c in self.confirmations],
        }
