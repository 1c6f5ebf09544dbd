"""
Incremental transcript aligner.

Consumes hypothesis segments one at a time and advances a cursor over the
reference tokens. Segments sharing a result_index are revisions of the same
utterance and re-transcribe it from its start, so the words of that
utterance already consumed are skipped on every revision.

Per transcript token, in order:
1. Exact match                     -> confirm
2. Combined tokens, exact          -> confirm one word, consume the pieces
3. Fuzzy match                     -> confirm
4. Combined tokens, fuzzy          -> confirm one word, consume the pieces
5. Expected word starts with token -> wait for a later revision
6. Containment                     -> confirm
7. Otherwise                       -> skip token as noise
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .passage import ReferenceToken
from .text_matcher import (
    MatchKind,
    contains_either,
    fuzzy_match,
    is_deferred_prefix,
    match_combined,
)
from .text_preprocessor import preprocess_for_matching

logger = logging.getLogger(__name__)


# =============================================================================
@dataclass(frozen=True)
class HypothesisSegment:
    """One delivery of speech-recognition output."""
    result_index: int     # Groups revisions of one utterance
    transcript_text: str  # Current best guess for that utterance
    is_final: bool = False


@dataclass
class MatchCursor:
    """Number of reference tokens confirmed so far."""
    confirmed_count: int = 0


@dataclass
class RevisionState:
    """
    Which utterance is open and how many of its words were consumed.

    last_result_index is None while no revision is active.
    """
    last_result_index: Optional[int] = None
    consumed: int = 0

    def clear(self) -> None:
        self.last_result_index = None
        self.consumed = 0


@dataclass
class Confirmation:
    """A reference word confirmed by one transcript step."""
    token: ReferenceToken
    kind: MatchKind
    source_words: list[str] = field(default_factory=list)


# =============================================================================
def align_segment(
    segment: HypothesisSegment,
    reference: list[ReferenceToken],
    cursor: MatchCursor,
    revision: RevisionState,
) -> list[Confirmation]:
    """
    Advance ``cursor`` over ``reference`` using one hypothesis segment.

    Mutates ``cursor`` and ``revision`` in place and returns the newly
    confirmed words in order. Never raises for transcript content: empty or
    unrecognizable segments confirm nothing.
    """
    if segment.result_index != revision.last_result_index:
        revision.last_result_index = segment.result_index
        revision.consumed = 0

    _, all_words = preprocess_for_matching(segment.transcript_text or "")
    candidates = all_words[revision.consumed:]

    confirmed: list[Confirmation] = []
    i = 0

    while i < len(candidates):
        if cursor.confirmed_count >= len(reference):
            break

        target = reference[cursor.confirmed_count]
        expected = target.match_key
        word = candidates[i]

        kind = None
        used = 1

        if word == expected:
            kind = MatchKind.EXACT
        else:
            used = match_combined(candidates, i, expected, allow_fuzzy=False)
            if used:
                kind = MatchKind.COMBINED
            elif fuzzy_match(word, expected):
                kind, used = MatchKind.FUZZY, 1
            else:
                used = match_combined(candidates, i, expected)
                if used:
                    kind = MatchKind.COMBINED

        if kind is None:
            is_last = i == len(candidates) - 1
            if is_deferred_prefix(word, expected, segment.is_final, is_last):
                # Recognizer is still mid-word; a later revision will finish it
                break
            if contains_either(word, expected):
                kind, used = MatchKind.CONTAINMENT, 1

        if kind is None:
            # Noise or filler
            revision.consumed += 1
            i += 1
            continue

        cursor.confirmed_count += 1
        revision.consumed += used
        confirmed.append(Confirmation(token=target, kind=kind, source_words=candidates[i:i + used]))
        logger.debug(
            "Confirmed word %d/%d %r via %s from %r",
            cursor.confirmed_count, len(reference), expected, kind.value, candidates[i:i + used],
        )
        i += used

    return confirmed
