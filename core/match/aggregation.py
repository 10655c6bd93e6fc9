"""
Aggregation over the match archive: league standings and top scorers.

Everything here is derived on demand from the full record list and never
persisted.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional

from core.match.models import (
    PLACEHOLDER_SCORER,
    MatchRecord,
    ScorerReport,
    ScorerReportStatus,
    StandingsRow,
    Team,
)

POINTS_WIN = 3
POINTS_DRAW = 1
POINTS_LOSS = 0

TOP_SCORERS_LIMIT = 5


def _same_sport(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def filter_by_sport(records: Iterable[MatchRecord], sport: Optional[str]) -> List[MatchRecord]:
    if not sport or not sport.strip():
        return list(records)
    return [r for r in records if _same_sport(r.sport, sport)]


def result_points(goals_for: int, goals_against: int) -> int:
    if goals_for > goals_against:
        return POINTS_WIN
    if goals_for == goals_against:
        return POINTS_DRAW
    return POINTS_LOSS


def standings_sort_key(row: StandingsRow):
    return (-row.points, -row.goal_difference, -row.goals_for, row.team)


def compute_standings(
    records: Iterable[MatchRecord],
    sport: Optional[str] = None,
) -> List[StandingsRow]:
    """
    League table: 3 points per win, 1 per draw, ordered by points, goal
    difference, goals for (all descending) and finally team name.
    """
    totals: Dict[str, Dict[str, int]] = {}

    for match in filter_by_sport(records, sport):
        for team, scored, conceded in (
            (match.team1, match.score1, match.score2),
            (match.team2, match.score2, match.score1),
        ):
            entry = totals.setdefault(
                team, {"played": 0, "for": 0, "against": 0, "points": 0}
            )
            entry["played"] += 1
            entry["for"] += scored
            entry["against"] += conceded
            entry["points"] += result_points(scored, conceded)

    rows = [
        StandingsRow(
            team=team,
            games_played=entry["played"],
            goals_for=entry["for"],
            goals_against=entry["against"],
            points=entry["points"],
        )
        for team, entry in totals.items()
    ]
    rows.sort(key=standings_sort_key)
    return rows


def is_attributable(name: str) -> bool:
    if not name or not name.strip():
        return False
    return name.casefold() != PLACEHOLDER_SCORER.casefold()


def tally_scorers(records: Iterable[MatchRecord], sport: Optional[str] = None) -> Counter:
    tally: Counter = Counter()
    for match in filter_by_sport(records, sport):
        for name in (*match.scorers_team1, *match.scorers_team2):
            if is_attributable(name):
                tally[name] += 1
    return tally


def top_scorers(
    records: Iterable[MatchRecord],
    sport: Optional[str],
    teams: Iterable[Team],
    *,
    limit: int = TOP_SCORERS_LIMIT,
) -> ScorerReport:
    """
    Top scorers of one sport.

    `teams` are the roster teams of that sport; when none of them has scorer
    attribution enabled the report is DISABLED rather than empty.
    """
    if not sport or not sport.strip():
        return ScorerReport(ScorerReportStatus.DISABLED)

    if not any(team.scorers_enabled for team in teams):
        return ScorerReport(ScorerReportStatus.DISABLED)

    tally = tally_scorers(records, sport)
    if not tally:
        return ScorerReport(ScorerReportStatus.NONE_FOUND)

    ranked = sorted(tally.items(), key=lambda item: (-item[1], item[0]))
    return ScorerReport(ScorerReportStatus.OK, tuple(ranked[:limit]))
