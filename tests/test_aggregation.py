"""Tests for core.match.aggregation."""

from datetime import datetime, timedelta, timezone

from core.match.aggregation import (
    compute_standings,
    filter_by_sport,
    tally_scorers,
    top_scorers,
)
from core.match.models import MatchRecord, ScorerReportStatus, Team

T0 = datetime(2026, 1, 4, tzinfo=timezone.utc)


def _match(team1, score1, team2, score2, *, sport="Soccer", s1=(), s2=(), n=0) -> MatchRecord:
    return MatchRecord(
        chat_id="c1",
        sport=sport,
        team1=team1,
        team2=team2,
        score1=score1,
        score2=score2,
        scorers_team1=tuple(s1),
        scorers_team2=tuple(s2),
        timestamp=T0 + timedelta(minutes=n),
    )


SOCCER_TEAMS = [
    Team("Reds", "Soccer", ("A", "B"), scorers_enabled=True),
    Team("Blues", "Soccer", ("C",), scorers_enabled=False),
]


class TestStandings:
    def test_win_draw_loss_points(self):
        rows = compute_standings([
            _match("Reds", 2, "Blues", 1),
            _match("Blues", 0, "Reds", 0, n=1),
        ])
        by_team = {r.team: r for r in rows}

        assert by_team["Reds"].points == 4
        assert by_team["Reds"].games_played == 2
        assert by_team["Reds"].goal_difference == 1
        assert by_team["Blues"].points == 1
        assert by_team["Blues"].goals_against == 2

    def test_ordering_keys(self):
        rows = compute_standings([
            _match("A", 1, "X", 0),       # A: 3 pts, +1, 1 GF
            _match("B", 3, "Y", 1, n=1),  # B: 3 pts, +2, 3 GF
            _match("C", 4, "Z", 2, n=2),  # C: 3 pts, +2, 4 GF
        ])
        assert [r.team for r in rows[:3]] == ["C", "B", "A"]

    def test_full_tie_breaks_on_name(self):
        rows = compute_standings([
            _match("Zebras", 1, "Ants", 1),
        ])
        assert [r.team for r in rows] == ["Ants", "Zebras"]

    def test_sport_filter_is_case_insensitive(self):
        records = [
            _match("Reds", 1, "Blues", 0),
            _match("Hawks", 80, "Owls", 70, sport="Basketball", n=1),
        ]
        rows = compute_standings(records, "soccer")
        assert {r.team for r in rows} == {"Reds", "Blues"}

    def test_no_filter_includes_everything(self):
        records = [
            _match("Reds", 1, "Blues", 0),
            _match("Hawks", 80, "Owls", 70, sport="Basketball", n=1),
        ]
        assert len(filter_by_sport(records, None)) == 2
        assert len(compute_standings(records)) == 4

    def test_deterministic_for_identical_input(self):
        records = [_match("B", 1, "A", 1), _match("C", 1, "D", 1, n=1)]
        assert compute_standings(records) == compute_standings(list(reversed(records)))


class TestTopScorers:
    def test_placeholder_entries_are_excluded(self):
        records = [_match("Reds", 2, "Blues", 0, s1=("Guest", "guest"))]
        assert tally_scorers(records) == {}

    def test_blank_names_are_excluded(self):
        records = [_match("Reds", 2, "Blues", 0, s1=("", "  "))]
        assert not tally_scorers(records)

    def test_disabled_when_no_team_tracks_scorers(self):
        teams = [Team("Hawks", "Basketball"), Team("Owls", "Basketball")]
        report = top_scorers([], "Basketball", teams)
        assert report.status is ScorerReportStatus.DISABLED

    def test_disabled_without_sport(self):
        report = top_scorers([], "", SOCCER_TEAMS)
        assert report.status is ScorerReportStatus.DISABLED

    def test_none_found_is_distinct_from_disabled(self):
        records = [_match("Reds", 1, "Blues", 0, s1=("Guest",))]
        report = top_scorers(records, "Soccer", SOCCER_TEAMS)
        assert report.status is ScorerReportStatus.NONE_FOUND

    def test_top_five_by_count_then_name(self):
        records = [
            _match("Reds", 3, "Blues", 3, s1=("Fay", "Eve", "Eve"), s2=("Dan", "Cid", "Bob")),
            _match("Reds", 2, "Blues", 1, s1=("Ann", "Fay"), s2=("Gus",), n=1),
        ]
        report = top_scorers(records, "Soccer", SOCCER_TEAMS)

        assert report.status is ScorerReportStatus.OK
        assert report.entries == (
            ("Eve", 2),
            ("Fay", 2),
            ("Ann", 1),
            ("Bob", 1),
            ("Cid", 1),
        )

    def test_other_sports_do_not_count(self):
        records = [
            _match("Reds", 1, "Blues", 0, s1=("A",)),
            _match("Hawks", 1, "Owls", 0, sport="Basketball", s1=("A",), n=1),
        ]
        report = top_scorers(records, "Soccer", SOCCER_TEAMS)
        assert report.entries == (("A", 1),)
