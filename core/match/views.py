"""
Outbound view requests and button grid builders.

A ViewRequest is transport-neutral: message text plus a 2-D grid of
(label, token) buttons. Transports decide how to render it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from core.match.intents import (
    CANCEL_TOKEN,
    CONFIRM_TOKEN,
    info_token,
    score_token,
    scorer_token,
    skip_scorer_token,
    sport_token,
    team_token,
)
from core.match.models import Team
from core.match.score import ScoreAction
from shared.localization.catalog import MessageCatalog
from shared.logging.logger import get_logger

log = get_logger("core.views")

# Longest button token a transport accepts (Discord custom_id limit).
MAX_TOKEN_BYTES = 100

PLAYERS_PER_ROW = 2


@dataclass(frozen=True)
class Button:
    label: str
    token: str


Grid = Tuple[Tuple[Button, ...], ...]


@dataclass(frozen=True)
class ViewRequest:
    """
    One prompt for the presentation layer.

    text=None means "leave the current message as it is"; `notice` is a
    short acknowledgement (shown prominently when `alert` is set) and `edit`
    asks the transport to replace the message that carried the pressed
    button instead of sending a new one.
    """

    chat_id: str
    text: Optional[str]
    options: Grid = ()
    notice: Optional[str] = None
    alert: bool = False
    edit: bool = True

    @classmethod
    def notice_only(cls, chat_id: str, notice: str, *, alert: bool = True) -> "ViewRequest":
        return cls(chat_id=chat_id, text=None, notice=notice, alert=alert, edit=False)

    def buttons(self) -> List[Button]:
        return [button for row in self.options for button in row]


def grid(rows: Iterable[Sequence[Button]]) -> Grid:
    return tuple(tuple(row) for row in rows if row)


# ----------------------------------------------------------------------
# Localized labels
# ----------------------------------------------------------------------

def sport_labels(catalog: MessageCatalog, sport: str) -> Tuple[str, str]:
    """Return (emoji, display name) for a sport key."""

    key = sport.lower()
    emoji = catalog.get_optional(f"{key}.emoji") or "🏅"
    name = catalog.get_optional(f"{key}.name") or sport.capitalize()
    return emoji, name


# ----------------------------------------------------------------------
# Keyboards
# ----------------------------------------------------------------------

def sport_keyboard(catalog: MessageCatalog, sports: Iterable[str], *, info: bool = False) -> Grid:
    rows = []
    for sport in sports:
        emoji, name = sport_labels(catalog, sport)
        token = info_token(sport) if info else sport_token(sport)
        rows.append([Button(catalog.get("sportButton", emoji=emoji, name=name), token)])
    return grid(rows)


def team_keyboard(catalog: MessageCatalog, teams: Iterable[Team], slot: int) -> Grid:
    return grid(
        [Button(catalog.get("teamButton", team=team.name), team_token(slot, team.name))]
        for team in teams
    )


def score_keyboard(catalog: MessageCatalog, slot: int) -> Grid:
    rows = [
        [Button(str(d), score_token(slot, d)) for d in range(start, start + 3)]
        for start in (1, 4, 7)
    ]
    rows.append([
        Button(catalog.get("scoreDone"), score_token(slot, ScoreAction.COMMIT)),
        Button("0", score_token(slot, 0)),
        Button(catalog.get("scoreDelete"), score_token(slot, ScoreAction.DELETE)),
    ])
    return grid(rows)


def scorer_keyboard(
    catalog: MessageCatalog,
    team: str,
    players: Iterable[str],
    *,
    max_token_bytes: int = MAX_TOKEN_BYTES,
) -> Grid:
    rows: List[List[Button]] = []
    current: List[Button] = []

    for player in players:
        token = scorer_token(player)
        size = len(token.encode("utf-8"))
        if size > max_token_bytes:
            log.warning(
                f"Player name '{player}' of {team} is too long for a button token "
                f"({size} bytes); skipping player"
            )
            continue

        current.append(Button(catalog.get("playerButton", player=player), token))
        if len(current) == PLAYERS_PER_ROW:
            rows.append(current)
            current = []

    if current:
        rows.append(current)

    rows.append([Button(catalog.get("skipScorer"), skip_scorer_token())])
    return grid(rows)


def confirmation_keyboard(catalog: MessageCatalog) -> Grid:
    return grid([[
        Button(catalog.get("confirm"), CONFIRM_TOKEN),
        Button(catalog.get("cancel"), CANCEL_TOKEN),
    ]])
