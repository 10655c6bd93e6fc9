"""
Match registration package.

Holds the conversation state machine together with the pieces it drives:
sessions, score entry, scorer assignment, the match archive and the
standings / top-scorer aggregation.

IMPORTANT:
- Only roster-independent modules are re-exported here. core.roster imports
  core.match.models, so the machine and the league reports are imported
  from their own modules (core.match.machine, core.match.league).
"""

from .archive import InMemoryMatchArchive, JsonMatchArchive, MatchArchive
from .models import (
    PLACEHOLDER_SCORER,
    UNSET,
    MatchRecord,
    MatchStage,
    Session,
    StandingsRow,
    Team,
)
from .session_store import SessionStore

__all__ = [
    "PLACEHOLDER_SCORER",
    "UNSET",
    "InMemoryMatchArchive",
    "JsonMatchArchive",
    "MatchArchive",
    "MatchRecord",
    "MatchStage",
    "Session",
    "SessionStore",
    "StandingsRow",
    "Team",
]
