"""
Runtime error taxonomy.

Every failure raised while processing a chat event derives from
MatchDayError so the dispatcher boundary can tell expected conversation
errors apart from unexpected crashes.
"""

from __future__ import annotations

from typing import Optional


class MatchDayError(Exception):
    """Base class for all MatchDay runtime errors."""


class StageViolation(MatchDayError):
    """
    An event arrived that does not belong to the session's current stage.

    Recoverable: the session is left untouched and the user is notified.
    """

    def __init__(self, stage: str, token: Optional[str] = None):
        super().__init__(f"Unexpected input {token!r} for stage {stage}")
        self.stage = stage
        self.token = token


class InvalidSessionState(MatchDayError):
    """
    The session reached a state the conversation flow never produces
    (e.g. entering Scorers without both scores set).

    The session must be cleared; continuing would yield an inconsistent record.
    """

    def __init__(self, message: str, *, message_key: str = "internalErrorIncompleteState"):
        super().__init__(message)
        self.message_key = message_key


class ArchiveUnavailableError(MatchDayError):
    """The match archive could not be read or written. No record was committed."""
