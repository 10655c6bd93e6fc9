"""
Scorer assignment engine.

Collects exactly one name (or a placeholder) per goal for the team that is
currently scoring, then hands over to the other team or to confirmation.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from core.errors import InvalidSessionState
from core.match.models import PLACEHOLDER_SCORER, UNSET, MatchStage, Session, is_set


class ScorerOutcome(Enum):
    ADDED = "added"
    SKIPPED = "skipped"
    ALREADY_COMPLETE = "already_complete"


@dataclass(frozen=True)
class ScorerStep:
    outcome: ScorerOutcome
    team: str
    complete: bool


def _require_scoring_context(session: Session) -> str:
    if not is_set(session.scoring_team) or not session.scores_set():
        raise InvalidSessionState(
            f"Scorer input for chat {session.chat_id} without scoring team or scores "
            f"(stage {session.stage})"
        )
    return session.scoring_team


def record_scorer(session: Session, name: str, *, skip: bool = False) -> ScorerStep:
    """
    Append one scorer for the current scoring team.

    A named scorer that arrives after the team's list is already full is
    reported as ALREADY_COMPLETE; the caller still re-runs the completion
    transition.
    """
    team = _require_scoring_context(session)
    target = session.score_of(team)
    scorers = session.scorers_of(team)

    if target == 0:
        raise InvalidSessionState(
            f"Scorer input for team {team} with 0 goals in chat {session.chat_id}",
            message_key="internalErrorZeroGoals",
        )

    if len(scorers) >= target:
        return ScorerStep(ScorerOutcome.ALREADY_COMPLETE, team, True)

    if skip:
        scorers.append(PLACEHOLDER_SCORER)
        outcome = ScorerOutcome.SKIPPED
    else:
        scorers.append(name)
        outcome = ScorerOutcome.ADDED

    return ScorerStep(outcome, team, len(scorers) == target)


def start_scorer_collection(session: Session) -> MatchStage:
    """
    Pick the first team that needs scorers after both scores are committed.

    Returns the stage the session ends up in (Scorers or Confirmation).
    """
    if not session.scores_set():
        raise InvalidSessionState(
            f"Entering scorer collection for chat {session.chat_id} without both scores"
        )

    if session.score1 > 0:
        session.scoring_team = session.team1
        session.stage = MatchStage.SCORERS
    elif session.score2 > 0:
        session.scoring_team = session.team2
        session.stage = MatchStage.SCORERS
    else:
        session.scoring_team = UNSET
        session.stage = MatchStage.CONFIRMATION

    return session.stage


def complete_team(session: Session) -> MatchStage:
    """Apply the hand-over once the current scoring team's list is full."""

    team = _require_scoring_context(session)

    if team == session.team1 and session.score2 > 0:
        session.scoring_team = session.team2
        session.stage = MatchStage.SCORERS
    else:
        session.stage = MatchStage.CONFIRMATION

    return session.stage
