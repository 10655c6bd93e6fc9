"""
League reports: standings and top-scorer views, and undo.

Reads the match archive through the aggregation engine and renders the
results with the message catalog.
"""
from __future__ import annotations

from typing import List

from core.match.aggregation import compute_standings, top_scorers
from core.match.archive import MatchArchive
from core.match.models import ScorerReportStatus, StandingsRow
from core.match.views import ViewRequest, sport_keyboard, sport_labels
from core.roster import RosterService
from shared.localization.catalog import MessageCatalog
from shared.logging.logger import get_logger

log = get_logger("core.league")


class LeagueReports:
    def __init__(
        self,
        *,
        archive: MatchArchive,
        roster: RosterService,
        catalog: MessageCatalog,
    ):
        self._archive = archive
        self._roster = roster
        self._catalog = catalog

    # ------------------------------------------------------------------
    # Text rendering
    # ------------------------------------------------------------------

    def _labels_for(self, sport: str):
        key = sport.lower()
        goals_label = (
            self._catalog.get_optional(f"{key}.goalsLabel")
            or self._catalog.get("pointsScored")
        )
        diff_label = (
            self._catalog.get_optional(f"{key}.diffLabel")
            or self._catalog.get("diffPoints")
        )
        return goals_label, diff_label

    def standings_rows(self, sport: str) -> List[StandingsRow]:
        return compute_standings(self._archive.all(), sport)

    def standings_text(self, sport: str) -> str:
        rows = self.standings_rows(sport)
        if not rows:
            return self._catalog.get("noStandingsAvailable")

        goals_label, diff_label = self._labels_for(sport)
        return "\n".join(
            self._catalog.get(
                "standingsLine",
                position=position,
                team=row.team,
                points=row.points,
                goals_label=goals_label,
                goals_for=row.goals_for,
                diff_label=diff_label,
                goal_difference=row.goal_difference,
                games_played=row.games_played,
            )
            for position, row in enumerate(rows, start=1)
        )

    def top_scorers_text(self, sport: str) -> str:
        report = top_scorers(
            self._archive.all(),
            sport,
            self._roster.teams_by_sport(sport) if sport else [],
        )

        if report.status is ScorerReportStatus.DISABLED:
            return self._catalog.get("scorersDisabled")
        if report.status is ScorerReportStatus.NONE_FOUND:
            return self._catalog.get("noScorersFound")

        return "\n".join(
            self._catalog.get("topScorerLine", name=name, goals=goals)
            for name, goals in report.entries
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def info_menu(self, chat_id: str) -> ViewRequest:
        sports = self._roster.sports()
        if not sports:
            return ViewRequest(chat_id, self._catalog.get("noSportsAvailable"), edit=False)

        return ViewRequest(
            chat_id,
            self._catalog.get("chooseSportInfo"),
            sport_keyboard(self._catalog, sports, info=True),
            edit=False,
        )

    def sport_info(self, chat_id: str, sport: str) -> ViewRequest:
        log.info(f"Info requested for sport {sport} in chat {chat_id}")
        emoji, name = sport_labels(self._catalog, sport)

        text = self._catalog.get(
            "sportInfo",
            emoji=emoji,
            sport=name,
            standings=self.standings_text(sport),
            scorers=self.top_scorers_text(sport),
        )
        return ViewRequest(chat_id, text)

    def undo(self, chat_id: str) -> ViewRequest:
        removed = self._archive.remove_most_recent_for_chat(chat_id)
        key = "matchUndone" if removed is not None else "noMatchToUndo"
        return ViewRequest(chat_id, self._catalog.get(key), edit=False)
