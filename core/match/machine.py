"""
Conversation state machine for match registration.

Stages advance Start → Sport → Team1 → Team2 → Score1 → Score2 →
(Scorers) → Confirmation. Each intent carries the stage it belongs to; an
intent for any other stage is rejected without touching the session.

The machine is synchronous and owns no locks: the dispatcher guarantees
that at most one event per chat is in flight.
"""
from __future__ import annotations

from typing import List

from core.errors import InvalidSessionState, StageViolation
from core.match import scorers as scorer_engine
from core.match.archive import MatchArchive
from core.match.intents import (
    Cancel,
    Confirm,
    Intent,
    ScoreKey,
    ScorerPicked,
    SportSelected,
    TeamSelected,
)
from core.match.league import LeagueReports
from core.match.models import MatchStage, Session, Team, is_set
from core.match.score import ScoreAction, commit, pop_digit, push_digit
from core.match.scorers import ScorerOutcome
from core.match.session_store import SessionStore
from core.match.views import (
    ViewRequest,
    confirmation_keyboard,
    score_keyboard,
    scorer_keyboard,
    sport_keyboard,
    sport_labels,
    team_keyboard,
)
from core.roster import RosterService
from shared.localization.catalog import MessageCatalog
from shared.logging.logger import get_logger

log = get_logger("core.machine")


class ConversationStateMachine:
    def __init__(
        self,
        *,
        sessions: SessionStore,
        roster: RosterService,
        archive: MatchArchive,
        catalog: MessageCatalog,
        reports: LeagueReports,
    ):
        self._sessions = sessions
        self._roster = roster
        self._archive = archive
        self._catalog = catalog
        self._reports = reports

    # ==================================================================
    # Entry points
    # ==================================================================

    def start_match(self, chat_id: str) -> ViewRequest:
        """Discard any in-progress registration and ask for the sport."""

        self._sessions.clear(chat_id)
        session = self._sessions.get_or_create(chat_id)

        sports = self._roster.sports()
        if not sports:
            self._sessions.clear(chat_id)
            return ViewRequest(chat_id, self._catalog.get("noSportsAvailable"), edit=False)

        session.stage = MatchStage.SPORT
        log.info(f"Match registration started in chat {chat_id}")

        return ViewRequest(
            chat_id,
            self._catalog.get("selectSportMatch"),
            sport_keyboard(self._catalog, sports),
            edit=False,
        )

    def handle(self, session: Session, intent: Intent) -> ViewRequest:
        """
        Apply one decoded intent to the session and return the next prompt.

        Raises InvalidSessionState when the session violates the flow's
        contract; the caller must clear the session.
        """
        if isinstance(intent, Cancel):
            return self._cancel(session)

        try:
            return self._dispatch(session, intent)
        except StageViolation as e:
            return self.reject(session, e.token)

    def _dispatch(self, session: Session, intent: Intent) -> ViewRequest:
        expected = getattr(intent, "stage", None)
        if expected is None or session.stage is not expected:
            raise StageViolation(str(session.stage), repr(intent))

        if isinstance(intent, SportSelected):
            return self._select_sport(session, intent)
        if isinstance(intent, TeamSelected):
            if intent.slot == 1:
                return self._select_team1(session, intent)
            return self._select_team2(session, intent)
        if isinstance(intent, ScoreKey):
            return self._score_key(session, intent)
        if isinstance(intent, ScorerPicked):
            return self._pick_scorer(session, intent)
        if isinstance(intent, Confirm):
            return self._confirm(session)

        raise StageViolation(str(session.stage), repr(intent))

    def reject(self, session: Session, what: object) -> ViewRequest:
        """Refuse an out-of-stage event; only the rejection counter changes."""

        session.rejected_events += 1
        log.info(
            f"Rejected {what} in chat {session.chat_id} at stage {session.stage}"
        )
        return ViewRequest.notice_only(
            session.chat_id,
            self._catalog.get("unexpectedInput", stage=str(session.stage)),
        )

    def unrecognized(self, session: Session) -> ViewRequest:
        """Free text or an unknown command."""

        if session.stage is MatchStage.START:
            return ViewRequest(session.chat_id, self._catalog.get("unknownCommand"), edit=False)
        return self.reject(session, "text")

    # ==================================================================
    # Sport / team selection
    # ==================================================================

    def _teams_of(self, session: Session) -> List[Team]:
        if not is_set(session.sport):
            raise InvalidSessionState(f"No sport selected in chat {session.chat_id}")
        return self._roster.teams_by_sport(session.sport)

    def _select_sport(self, session: Session, intent: SportSelected) -> ViewRequest:
        emoji, name = sport_labels(self._catalog, intent.sport)
        teams = self._roster.teams_by_sport(intent.sport) if intent.sport.strip() else []

        # Keep the roster's spelling of the sport, not the button key
        session.sport = teams[0].sport if teams else intent.sport
        if not teams:
            log.info(f"No teams for sport {intent.sport}; aborting registration in chat {session.chat_id}")
            self._sessions.clear(session.chat_id)
            return ViewRequest(session.chat_id, self._catalog.get("noTeamsFound", sport=name))

        session.stage = MatchStage.TEAM1
        return ViewRequest(
            session.chat_id,
            self._catalog.get("selectTeam1Message", emoji=emoji, sport=name),
            team_keyboard(self._catalog, teams, 1),
        )

    def _select_team1(self, session: Session, intent: TeamSelected) -> ViewRequest:
        teams = self._teams_of(session)
        if intent.team not in {t.name for t in teams}:
            raise StageViolation(str(session.stage), intent.team)

        session.team1 = intent.team
        opponents = [t for t in teams if t.name != intent.team]
        if not opponents:
            log.info(f"No opponent available for {intent.team} in chat {session.chat_id}")
            self._sessions.clear(session.chat_id)
            return ViewRequest(
                session.chat_id,
                self._catalog.get("noSecondTeamAvailable", team1=intent.team),
            )

        session.stage = MatchStage.TEAM2
        return ViewRequest(
            session.chat_id,
            self._catalog.get("selectTeam2Message", team1=intent.team),
            team_keyboard(self._catalog, opponents, 2),
        )

    def _select_team2(self, session: Session, intent: TeamSelected) -> ViewRequest:
        if not is_set(session.team1) or intent.team == session.team1:
            raise StageViolation(str(session.stage), intent.team)
        if intent.team not in {t.name for t in self._teams_of(session)}:
            raise StageViolation(str(session.stage), intent.team)

        session.team2 = intent.team
        session.scoring_team = session.team1
        session.stage = MatchStage.SCORE1
        return self._score_prompt(session, 1)

    # ==================================================================
    # Score entry
    # ==================================================================

    def _score_prompt(self, session: Session, slot: int) -> ViewRequest:
        def shown(value):
            return str(value) if is_set(value) else ""

        active = session.team1 if slot == 1 else session.team2
        text = self._catalog.get(
            "scorePrompt",
            team1=session.team1,
            score1=shown(session.score1),
            team2=session.team2,
            score2=shown(session.score2),
            active_team=active,
        )
        return ViewRequest(session.chat_id, text, score_keyboard(self._catalog, slot))

    def _score_key(self, session: Session, intent: ScoreKey) -> ViewRequest:
        if not (is_set(session.team1) and is_set(session.team2)):
            raise InvalidSessionState(
                f"Score entry in chat {session.chat_id} without both teams selected"
            )

        if not intent.valid:
            return ViewRequest.notice_only(session.chat_id, self._catalog.get("invalidScore"))

        field = "score1" if intent.slot == 1 else "score2"
        current = getattr(session, field)

        if intent.action is ScoreAction.DIGIT:
            setattr(session, field, push_digit(current, intent.digit))
            return self._score_prompt(session, intent.slot)

        if intent.action is ScoreAction.DELETE:
            setattr(session, field, pop_digit(current))
            return self._score_prompt(session, intent.slot)

        setattr(session, field, commit(current))
        if intent.slot == 1:
            session.stage = MatchStage.SCORE2
            return self._score_prompt(session, 2)

        return self._after_scores(session)

    def _attribution_enabled(self, session: Session) -> bool:
        return self._roster.scorers_enabled(session.team1) or self._roster.scorers_enabled(
            session.team2
        )

    def _after_scores(self, session: Session) -> ViewRequest:
        if not self._attribution_enabled(session):
            session.stage = MatchStage.CONFIRMATION
            return self._confirmation_prompt(session)

        stage = scorer_engine.start_scorer_collection(session)
        if stage is MatchStage.CONFIRMATION:
            return self._confirmation_prompt(session)
        return self._scorer_prompt(session)

    # ==================================================================
    # Scorers
    # ==================================================================

    def _scorer_prompt(self, session: Session, preamble: str = "") -> ViewRequest:
        team = session.scoring_team
        if not is_set(team) or not session.scores_set():
            raise InvalidSessionState(
                f"Scorer prompt for chat {session.chat_id} with incomplete state "
                f"(stage {session.stage})"
            )

        goals = session.score_of(team)
        if goals == 0:
            raise InvalidSessionState(
                f"Scorer prompt for team {team} with 0 goals in chat {session.chat_id}",
                message_key="internalErrorZeroGoals",
            )

        players = self._roster.players_of(team)
        if not players:
            log.warning(f"No players found for team {team} when selecting scorers")
            preamble += self._catalog.get("noPlayersForTeam")

        entered = session.scorers_of(team)
        so_far = self._catalog.get("soFar", scorers=", ".join(entered)) if entered else ""

        text = self._catalog.get(
            "selectScorerPrompt",
            preamble=preamble,
            index=len(entered) + 1,
            total=goals,
            team=team,
            so_far=so_far,
        )
        return ViewRequest(session.chat_id, text, scorer_keyboard(self._catalog, team, players))

    def _pick_scorer(self, session: Session, intent: ScorerPicked) -> ViewRequest:
        step = scorer_engine.record_scorer(session, intent.name, skip=intent.skip)

        alert = False
        if step.outcome is ScorerOutcome.ADDED:
            notice = self._catalog.get("scorerAdded", name=intent.name)
        elif step.outcome is ScorerOutcome.SKIPPED:
            notice = self._catalog.get("scorerSkip")
        else:
            notice = self._catalog.get("scorersAlreadyCompleted", team=step.team)
            alert = True

        if not step.complete:
            view = self._scorer_prompt(session)
        else:
            view = self._complete_team(session, step.team)

        return ViewRequest(
            view.chat_id, view.text, view.options, notice=notice, alert=alert, edit=view.edit
        )

    def _complete_team(self, session: Session, team: str) -> ViewRequest:
        entered = session.scorers_of(team)
        stage = scorer_engine.complete_team(session)

        if stage is MatchStage.CONFIRMATION:
            return self._confirmation_prompt(session)

        listed = self._catalog.get("scorersSoFar", scorers=", ".join(entered)) if entered else ""
        preamble = self._catalog.get("scorersConfirmed", team=team, scorers=listed)
        return self._scorer_prompt(session, preamble)

    # ==================================================================
    # Confirmation
    # ==================================================================

    def _scorer_lines(self, session: Session) -> str:
        lines = [
            self._catalog.get("scorerLine", team=team, scorers=", ".join(names))
            for team, names in (
                (session.team1, session.scorers_team1),
                (session.team2, session.scorers_team2),
            )
            if names
        ]
        return "\n".join(lines)

    def _confirmation_prompt(self, session: Session) -> ViewRequest:
        emoji, name = sport_labels(self._catalog, session.sport)

        if not self._attribution_enabled(session):
            scorers_section = self._catalog.get("scorersDisabled")
        else:
            lines = self._scorer_lines(session)
            scorers_section = (
                self._catalog.get("matchScorers", lines=lines)
                if lines
                else self._catalog.get("noScorersFound")
            )

        text = self._catalog.get(
            "matchConfirmation",
            emoji=emoji,
            sport=name,
            team1=session.team1,
            score1=session.score1,
            score2=session.score2,
            team2=session.team2,
            scorers_section=scorers_section,
        )
        session.stage = MatchStage.CONFIRMATION
        return ViewRequest(session.chat_id, text, confirmation_keyboard(self._catalog))

    def _confirm(self, session: Session) -> ViewRequest:
        record = session.to_record(self._archive.next_timestamp())

        self._archive.append(record)
        self._sessions.clear(session.chat_id)

        emoji, name = sport_labels(self._catalog, record.sport)
        lines = self._scorer_lines(session)
        scorers_section = self._catalog.get("savedScorers", lines=lines) if lines else ""

        text = self._catalog.get(
            "matchSaved",
            emoji=emoji,
            sport=name,
            team1=record.team1,
            score1=record.score1,
            score2=record.score2,
            team2=record.team2,
            standings=self._reports.standings_text(record.sport),
            scorers_section=scorers_section,
        )
        return ViewRequest(session.chat_id, text)

    def _cancel(self, session: Session) -> ViewRequest:
        log.info(f"Match registration cancelled in chat {session.chat_id} at stage {session.stage}")
        self._sessions.clear(session.chat_id)
        return ViewRequest(session.chat_id, self._catalog.get("matchCancelled"))
