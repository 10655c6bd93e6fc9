"""
Inbound events and decoded intents.

Transports deliver raw InboundEvents. They are decoded exactly once, at the
dispatch boundary, into one of the tagged intent types below; the state
machine only ever matches on intent types, never on raw token strings.

Button tokens (the opaque payload of a selection event):

    sport_<key>            team1_<name>          team2_<name>
    score1_<0-9|del|done>  score2_<0-9|del|done>
    scorer_<name>          scorer_skip!
    info_<sport>           confirm               cancel
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from core.match.models import MatchStage
from core.match.score import ScoreAction

SKIP_TOKEN = "skip!"

KNOWN_COMMANDS = ("start", "help", "info", "match", "undo")


class EventKind(Enum):
    COMMAND = "command"
    SELECTION = "selection"
    TEXT = "text"


@dataclass(frozen=True)
class InboundEvent:
    chat_id: str
    kind: EventKind
    payload: str
    user: Dict[str, Any] = field(default_factory=dict)


# ----------------------------------------------------------------------
# Intents
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Command:
    name: str


@dataclass(frozen=True)
class SportSelected:
    sport: str
    stage = MatchStage.SPORT


@dataclass(frozen=True)
class TeamSelected:
    slot: int
    team: str

    @property
    def stage(self) -> MatchStage:
        return MatchStage.TEAM1 if self.slot == 1 else MatchStage.TEAM2


@dataclass(frozen=True)
class ScoreKey:
    slot: int
    action: ScoreAction
    digit: Optional[int] = None
    raw: str = ""

    @property
    def stage(self) -> MatchStage:
        return MatchStage.SCORE1 if self.slot == 1 else MatchStage.SCORE2

    @property
    def valid(self) -> bool:
        return self.action is not ScoreAction.DIGIT or self.digit is not None


@dataclass(frozen=True)
class ScorerPicked:
    name: str
    skip: bool = False
    stage = MatchStage.SCORERS


@dataclass(frozen=True)
class InfoRequested:
    sport: str


@dataclass(frozen=True)
class Confirm:
    stage = MatchStage.CONFIRMATION


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class Unknown:
    raw: str = ""


Intent = Union[
    Command,
    SportSelected,
    TeamSelected,
    ScoreKey,
    ScorerPicked,
    InfoRequested,
    Confirm,
    Cancel,
    Unknown,
]


# ----------------------------------------------------------------------
# Token builders
# ----------------------------------------------------------------------

def sport_token(sport: str) -> str:
    return f"sport_{sport}"


def team_token(slot: int, team: str) -> str:
    return f"team{slot}_{team}"


def score_token(slot: int, key: Union[int, ScoreAction]) -> str:
    suffix = key.value if isinstance(key, ScoreAction) else str(key)
    return f"score{slot}_{suffix}"


def scorer_token(name: str) -> str:
    return f"scorer_{name}"


def skip_scorer_token() -> str:
    return scorer_token(SKIP_TOKEN)


def info_token(sport: str) -> str:
    return f"info_{sport}"


CONFIRM_TOKEN = "confirm"
CANCEL_TOKEN = "cancel"


# ----------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------

def _decode_command(text: str) -> Intent:
    head = text.strip().split(maxsplit=1)[0] if text.strip() else ""
    if not head.startswith("/"):
        return Unknown(text)

    name = head[1:].split("@", 1)[0].lower()
    if name in KNOWN_COMMANDS:
        return Command(name)
    return Unknown(text)


def _decode_score(slot: int, value: str, token: str) -> Intent:
    if value == ScoreAction.COMMIT.value:
        return ScoreKey(slot, ScoreAction.COMMIT, raw=token)
    if value == ScoreAction.DELETE.value:
        return ScoreKey(slot, ScoreAction.DELETE, raw=token)
    if len(value) == 1 and value.isdigit():
        return ScoreKey(slot, ScoreAction.DIGIT, int(value), raw=token)
    return ScoreKey(slot, ScoreAction.DIGIT, None, raw=token)


def decode_selection(token: str) -> Intent:
    if token == CONFIRM_TOKEN:
        return Confirm()
    if token == CANCEL_TOKEN:
        return Cancel()

    prefix, sep, value = token.partition("_")
    if not sep or not value:
        return Unknown(token)

    if prefix == "sport":
        return SportSelected(value)
    if prefix in ("team1", "team2"):
        return TeamSelected(int(prefix[-1]), value)
    if prefix in ("score1", "score2"):
        return _decode_score(int(prefix[-1]), value, token)
    if prefix == "scorer":
        if value == SKIP_TOKEN:
            return ScorerPicked(name="", skip=True)
        return ScorerPicked(name=value)
    if prefix == "info":
        return InfoRequested(value)

    return Unknown(token)


def decode_intent(event: InboundEvent) -> Intent:
    payload = event.payload or ""

    if event.kind is EventKind.SELECTION:
        return decode_selection(payload)

    # Commands and free text: only slash commands are meaningful
    return _decode_command(payload)
