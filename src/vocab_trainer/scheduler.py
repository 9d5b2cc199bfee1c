"""Four-grade spaced repetition scheduler.

Every function here is pure: it takes a CardState and returns new values
without touching storage, so it is safe to call from any thread.
"""
from dataclasses import dataclass
from enum import Enum

from vocab_trainer.intervals import DAY_MS, MINUTE_MS, round_half_up
from vocab_trainer.models import (
    INITIAL_EASE,
    MINIMUM_EASE,
    CardState,
    InvalidCardStateError,
    Status,
)

AGAIN_EASE_DELTA = -0.20
HARD_EASE_DELTA = -0.15
EASY_EASE_DELTA = 0.15

HARD_INTERVAL_MULTIPLIER = 1.2
EASY_INTERVAL_BONUS_MULTIPLIER = 1.5

AGAIN_LEARNING_INTERVAL = MINUTE_MS
HARD_LEARNING_INTERVAL = 6 * MINUTE_MS
GOOD_LEARNING_INTERVAL = 10 * MINUTE_MS
GRADUATING_INTERVAL = DAY_MS
EASY_GRADUATING_INTERVAL = 4 * DAY_MS

LAPSE_INTERVAL = 10 * MINUTE_MS
MINIMUM_HARD_INTERVAL = 5 * MINUTE_MS


class Grade(str, Enum):
    AGAIN = "Again"
    HARD = "Hard"
    GOOD = "Good"
    EASY = "Easy"


GRADES = (Grade.AGAIN, Grade.HARD, Grade.GOOD, Grade.EASY)


@dataclass(frozen=True)
class ReviewOption:
    grade: Grade
    next_state: CardState
    display_interval: int


def new_card() -> CardState:
    """State for a freshly added word: learning, first step, due immediately."""
    return CardState(status=Status.LEARNING, interval=None, ease=INITIAL_EASE, step=0)


def _floor_ease(ease: float) -> float:
    # two decimals, like a stored SM-2 ease factor
    return round(max(MINIMUM_EASE, ease), 2)


def _option(grade: Grade, status: Status, interval: int, ease: float, step: int = 0) -> ReviewOption:
    return ReviewOption(
        grade=grade,
        next_state=CardState(status=status, interval=interval, ease=ease, step=step),
        display_interval=interval,
    )


def _learning_options(state: CardState) -> list[ReviewOption]:
    ease = state.ease
    learning = state.status is Status.LEARNING

    again = _option(Grade.AGAIN, state.status, AGAIN_LEARNING_INTERVAL, ease)
    if learning:
        hard = _option(Grade.HARD, Status.LEARNING, HARD_LEARNING_INTERVAL, ease, step=1)
    else:
        # relearning has a single step, so Hard already returns to review
        hard = _option(Grade.HARD, Status.REVIEWING, HARD_LEARNING_INTERVAL, ease)
    if learning and state.step == 0:
        good = _option(Grade.GOOD, Status.LEARNING, GOOD_LEARNING_INTERVAL, ease, step=1)
    else:
        good = _option(Grade.GOOD, Status.REVIEWING, GRADUATING_INTERVAL, ease)
    easy = _option(Grade.EASY, Status.REVIEWING, EASY_GRADUATING_INTERVAL, ease)
    return [again, hard, good, easy]


def _reviewing_options(state: CardState) -> list[ReviewOption]:
    ease = state.ease
    last_interval = state.interval or DAY_MS

    # each tier is at least a minute longer than the one before it
    hard_interval = max(MINIMUM_HARD_INTERVAL, round_half_up(last_interval * HARD_INTERVAL_MULTIPLIER))
    good_interval = max(hard_interval + MINUTE_MS, round_half_up(last_interval * ease))
    easy_interval = max(
        good_interval + MINUTE_MS,
        round_half_up(last_interval * ease * EASY_INTERVAL_BONUS_MULTIPLIER),
    )

    return [
        _option(Grade.AGAIN, Status.RELEARNING, LAPSE_INTERVAL, _floor_ease(ease + AGAIN_EASE_DELTA)),
        _option(Grade.HARD, Status.REVIEWING, hard_interval, _floor_ease(ease + HARD_EASE_DELTA)),
        _option(Grade.GOOD, Status.REVIEWING, good_interval, ease),
        _option(Grade.EASY, Status.REVIEWING, easy_interval, _floor_ease(ease + EASY_EASE_DELTA)),
    ]


def options(state: CardState) -> list[ReviewOption]:
    """Return the four grading options for a card, ordered Again, Hard, Good, Easy.

    The display intervals never decrease from left to right.
    """
    if not isinstance(state, CardState):
        raise InvalidCardStateError(f"expected a CardState, got {type(state).__name__}")
    if state.status in (Status.LEARNING, Status.RELEARNING):
        return _learning_options(state)
    if state.status is Status.REVIEWING:
        return _reviewing_options(state)
    raise InvalidCardStateError(f"unknown card status: {state.status!r}")


def review(state: CardState, grade: Grade) -> CardState:
    """Return the state that results from grading ``state`` with ``grade``."""
    grade = Grade(grade)
    for option in options(state):
        if option.grade is grade:
            return option.next_state
    raise InvalidCardStateError(f"no option for grade {grade!r}")
