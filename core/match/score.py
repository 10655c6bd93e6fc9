"""
Score accumulator.

Scores are typed one decimal digit at a time, left to right, with a
backspace key and a commit key. These helpers are pure: they take the
current field value (possibly UNSET) and return the new one.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Tuple, Union

from core.match.models import UNSET, Unset

MAX_SCORE_DIGITS = 6
MAX_SCORE = 10 ** MAX_SCORE_DIGITS - 1

ScoreValue = Union[int, Unset]


class ScoreAction(Enum):
    DIGIT = "digit"
    DELETE = "del"
    COMMIT = "done"


def push_digit(value: ScoreValue, digit: int) -> ScoreValue:
    if not 0 <= digit <= 9:
        raise ValueError(f"Score digit out of range: {digit}")

    if value is UNSET or value == 0:
        return digit

    candidate = value * 10 + digit
    if candidate > MAX_SCORE:
        return value
    return candidate


def pop_digit(value: ScoreValue) -> ScoreValue:
    if value is UNSET or value == 0:
        return value
    return value // 10


def commit(value: ScoreValue) -> int:
    return 0 if value is UNSET else value


def replay(keys: Iterable[Tuple[ScoreAction, int]], start: ScoreValue = UNSET) -> ScoreValue:
    """Re-derive a field value from a log of (action, digit) key presses."""

    value = start
    for action, digit in keys:
        if action is ScoreAction.DIGIT:
            value = push_digit(value, digit)
        elif action is ScoreAction.DELETE:
            value = pop_digit(value)
        else:
            return commit(value)
    return value
