"""
Match registration data model.

Sessions are transient per-chat conversation state. MatchRecords are the
immutable, persisted outcome of a confirmed session. Roster Teams are
read-only input. Standings rows and scorer reports are derived on demand and
never stored.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from core.errors import InvalidSessionState

# Recorded for a goal that is attributed to nobody ("skip").
PLACEHOLDER_SCORER = "Guest"


class Unset(Enum):
    """Marker for a session field that has not been chosen yet."""

    UNSET = "unset"

    def __repr__(self) -> str:
        return "UNSET"


UNSET = Unset.UNSET


def is_set(value: Any) -> bool:
    return value is not UNSET


class MatchStage(Enum):
    START = "Start"
    SPORT = "Sport"
    TEAM1 = "Team1"
    TEAM2 = "Team2"
    SCORE1 = "Score1"
    SCORE2 = "Score2"
    SCORERS = "Scorers"
    CONFIRMATION = "Confirmation"

    def __str__(self) -> str:
        return self.value


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    value = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class Team:
    """Read-only roster entry."""

    name: str
    sport: str
    players: Tuple[str, ...] = ()
    scorers_enabled: bool = False


@dataclass(frozen=True)
class MatchRecord:
    chat_id: str
    sport: str
    team1: str
    team2: str
    score1: int
    score2: int
    scorers_team1: Tuple[str, ...] = ()
    scorers_team2: Tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if self.score1 < 0 or self.score2 < 0:
            raise ValueError("Scores must be non-negative")
        for scorers, score in (
            (self.scorers_team1, self.score1),
            (self.scorers_team2, self.score2),
        ):
            if len(scorers) not in (0, score):
                raise ValueError(
                    f"Scorer list of length {len(scorers)} does not match score {score}"
                )

    def to_document(self) -> Dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "sport": self.sport,
            "team1": self.team1,
            "team2": self.team2,
            "score1": self.score1,
            "score2": self.score2,
            "scorers_team1": list(self.scorers_team1),
            "scorers_team2": list(self.scorers_team2),
            "timestamp": format_timestamp(self.timestamp),
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "MatchRecord":
        return cls(
            chat_id=str(doc["chat_id"]),
            sport=str(doc["sport"]),
            team1=str(doc["team1"]),
            team2=str(doc["team2"]),
            score1=int(doc["score1"]),
            score2=int(doc["score2"]),
            scorers_team1=tuple(doc.get("scorers_team1") or ()),
            scorers_team2=tuple(doc.get("scorers_team2") or ()),
            timestamp=parse_timestamp(doc["timestamp"]),
        )


@dataclass
class Session:
    """
    Transient conversation state for one chat.

    Fields that the user has not chosen yet hold UNSET rather than None, so
    a finished record can only be built once every one of them is set.
    """

    chat_id: str
    stage: MatchStage = MatchStage.START
    sport: Union[str, Unset] = UNSET
    team1: Union[str, Unset] = UNSET
    team2: Union[str, Unset] = UNSET
    score1: Union[int, Unset] = UNSET
    score2: Union[int, Unset] = UNSET
    scoring_team: Union[str, Unset] = UNSET
    scorers_team1: List[str] = field(default_factory=list)
    scorers_team2: List[str] = field(default_factory=list)
    rejected_events: int = 0

    def scores_set(self) -> bool:
        return is_set(self.score1) and is_set(self.score2)

    def score_of(self, team: str) -> int:
        if not self.scores_set():
            raise InvalidSessionState(
                f"Scores are not set for chat {self.chat_id} (stage {self.stage})"
            )
        return self.score1 if team == self.team1 else self.score2

    def scorers_of(self, team: str) -> List[str]:
        return self.scorers_team1 if team == self.team1 else self.scorers_team2

    def to_record(self, timestamp: Optional[datetime] = None) -> MatchRecord:
        missing = [
            name
            for name in ("sport", "team1", "team2", "score1", "score2")
            if not is_set(getattr(self, name))
        ]
        if missing:
            raise InvalidSessionState(
                f"Cannot finalize match for chat {self.chat_id}; missing {', '.join(missing)}",
                message_key="invalidMatchData",
            )

        try:
            return MatchRecord(
                chat_id=self.chat_id,
                sport=self.sport,
                team1=self.team1,
                team2=self.team2,
                score1=self.score1,
                score2=self.score2,
                scorers_team1=tuple(self.scorers_team1),
                scorers_team2=tuple(self.scorers_team2),
                timestamp=timestamp or _utc_now(),
            )
        except ValueError as e:
            raise InvalidSessionState(str(e), message_key="invalidMatchData") from e


@dataclass(frozen=True)
class StandingsRow:
    team: str
    games_played: int
    goals_for: int
    goals_against: int
    points: int

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against


class ScorerReportStatus(Enum):
    DISABLED = "disabled"
    NONE_FOUND = "none_found"
    OK = "ok"


@dataclass(frozen=True)
class ScorerReport:
    status: ScorerReportStatus
    entries: Tuple[Tuple[str, int], ...] = ()
