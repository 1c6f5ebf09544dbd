"""
Speech recognition capability contract and the controller that wires a
capability to a RecitationSession.

The capability is owned by the controller and injected, never looked up as
global state. It comes in two variants: one that can listen, and
UnavailableRecognizer for environments without a recognizer.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

from .errors import PermissionDeniedError, RecitationError, UnsupportedCapabilityError
from .passage import ReferenceToken, Verse, build_reference_tokens
from .session import RecitationSession
from .transcript_aligner import HypothesisSegment

logger = logging.getLogger(__name__)

# Error code reported by a capability when microphone access was refused
ERROR_NOT_ALLOWED = "not-allowed"


class RecognitionListener(Protocol):
    """Callbacks a capability delivers to, in order, from one thread at a time."""

    def on_segment(self, segment: HypothesisSegment) -> None: ...

    def on_error(self, code: str) -> None: ...

    def on_end(self) -> None: ...


class RecognitionCapability(Protocol):
    """Contract for continuous speech recognition backends."""

    available: bool

    def start(self, listener: RecognitionListener) -> None:
        """Begin a recognition run; result indices restart at 0."""
        ...

    def stop(self) -> None:
        """End the current run. The listener receives on_end."""
        ...


class UnavailableRecognizer:
    """Stand-in for platforms with no speech recognition."""
    available = False

    def start(self, listener: RecognitionListener) -> None:
        raise UnsupportedCapabilityError()

    def stop(self) -> None:
        pass


def create_recognizer(**kwargs) -> RecognitionCapability:
    """Return the Whisper recognizer when its dependencies import, else the unavailable variant."""
    from .whisper_stream import WHISPER_AVAILABLE, WhisperStreamRecognizer

    if WHISPER_AVAILABLE:
        return WhisperStreamRecognizer(**kwargs)
    logger.warning("Speech recognition unavailable: torch/transformers not installed")
    return UnavailableRecognizer()


# =============================================================================
class RecitationController:
    """
    Listening state machine around one session.

    - start/resume keeps confirmed progress, only the open utterance is forgotten
    - completion stops the recognizer
    - an end that was neither requested nor caused by completion restarts it
    - a refused microphone clears listening and leaves a notice
    """

    def __init__(
        self,
        recognizer: RecognitionCapability,
        session: Optional[RecitationSession] = None,
    ):
        self.recognizer = recognizer
        self.session = session or RecitationSession()
        self.session.on_complete = self._on_session_complete
        self.is_listening = False
        self.restart_count = 0
        self._notice: Optional[RecitationError] = None
        # Reentrant: stopping on completion can flush a final segment back into on_segment
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    def load_passage(self, verses: list[Verse]) -> list[ReferenceToken]:
        """Rebuild the session for a new passage; any listening run is stopped."""
        tokens = build_reference_tokens(verses)
        if self.is_listening:
            self.stop_listening()
        with self._lock:
            self.session.reset(tokens)
        return tokens

    def start_listening(self) -> None:
        """Start or resume recitation. Raises UnsupportedCapabilityError."""
        if not self.recognizer.available:
            raise UnsupportedCapabilityError()
        if self.is_listening:
            return
        if self.session.is_complete:
            logger.info("Passage already complete, not listening")
            return

        with self._lock:
            self.session.restart_revisions()
        self.is_listening = True
        try:
            self.recognizer.start(self)
        except RecitationError:
            self.is_listening = False
            raise
        logger.info("Listening started at word %d", self.session.confirmed_count)

    def stop_listening(self) -> None:
        """User stop; confirmed progress is kept for resuming."""
        self.is_listening = False
        self.recognizer.stop()
        logger.info("Listening stopped at word %d", self.session.confirmed_count)

    def pending_notice(self) -> Optional[RecitationError]:
        """Pop the last user-visible notice, if any."""
        notice, self._notice = self._notice, None
        return notice

    # -------------------------------------------------------------------------
    # RecognitionListener
    # -------------------------------------------------------------------------
    def on_segment(self, segment: HypothesisSegment) -> None:
        with self._lock:
            self.session.on_hypothesis_segment(segment)
        # A run left open on a finished passage stops on its next result
        if self.is_listening and self.session.is_complete:
            self._on_session_complete(self.session)

    def on_error(self, code: str) -> None:
        if code == ERROR_NOT_ALLOWED:
            self.is_listening = False
            self._notice = PermissionDeniedError()
            logger.warning("Microphone permission denied")
        else:
            logger.warning("Recognition error: %s", code)

    def on_end(self) -> None:
        if self.is_listening and not self.session.is_complete:
            self.restart_count += 1
            logger.info("Recognition ended unexpectedly, restarting (%d)", self.restart_count)
            with self._lock:
                self.session.restart_revisions()
            self.recognizer.start(self)
        else:
            self.is_listening = False

    def _on_session_complete(self, session: RecitationSession) -> None:
        self.is_listening = False
        self.recognizer.stop()
