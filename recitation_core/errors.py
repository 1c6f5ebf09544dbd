"""Exceptions carrying a user-facing notice."""

from .config import NOTICE_UNSUPPORTED, NOTICE_PERMISSION, NOTICE_FETCH_FAILED


class RecitationError(Exception):
    """Base error; ``notice`` is the message shown to the user."""
    notice = ""

    def __init__(self, message=None):
        super().__init__(message or self.notice)


class UnsupportedCapabilityError(RecitationError):
    """Speech recognition is not available in this environment."""
    notice = NOTICE_UNSUPPORTED


class PermissionDeniedError(RecitationError):
    """The user declined microphone access."""
    notice = NOTICE_PERMISSION


class ContentFetchError(RecitationError):
    """The content API could not deliver the requested data."""
    notice = NOTICE_FETCH_FAILED

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code
