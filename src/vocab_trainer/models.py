"""Data classes for the vocabulary deck and card scheduling state."""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

INITIAL_EASE = 2.5
MINIMUM_EASE = 1.3


class InvalidCardStateError(ValueError):
    """Raised when a card state breaks the scheduling invariants."""


class Status(str, Enum):
    LEARNING = "learning"
    REVIEWING = "reviewing"
    RELEARNING = "relearning"


@dataclass(frozen=True)
class CardState:
    """Scheduling state of one vocabulary item.

    ``interval`` is the last scheduled gap in milliseconds (None for a card
    that has never been graded). ``step`` only distinguishes the first and
    second learning prompt and is always 0 outside of Learning.
    """

    status: Status = Status.LEARNING
    interval: Optional[int] = None
    ease: float = INITIAL_EASE
    step: int = 0

    def __post_init__(self):
        try:
            status = Status(self.status)
        except ValueError:
            raise InvalidCardStateError(f"unknown card status: {self.status!r}") from None
        object.__setattr__(self, "status", status)

        if self.interval is not None:
            if isinstance(self.interval, bool) or not isinstance(self.interval, int):
                raise InvalidCardStateError(f"interval must be an integer, got {self.interval!r}")
            if self.interval < 0:
                raise InvalidCardStateError(f"interval must not be negative, got {self.interval}")

        if isinstance(self.step, bool) or not isinstance(self.step, int) or self.step not in (0, 1):
            raise InvalidCardStateError(f"step must be 0 or 1, got {self.step!r}")
        if self.step != 0 and status is not Status.LEARNING:
            raise InvalidCardStateError(f"step {self.step} is only valid while learning")

        if isinstance(self.ease, bool) or not isinstance(self.ease, (int, float)):
            raise InvalidCardStateError(f"ease must be a number, got {self.ease!r}")
        if not math.isfinite(self.ease):
            raise InvalidCardStateError(f"ease must be finite, got {self.ease!r}")
        object.__setattr__(self, "ease", max(float(self.ease), MINIMUM_EASE))

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "interval": self.interval,
            "ease": self.ease,
            "step": self.step,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CardState":
        """Build a state from its stored form, clamping ease to the minimum."""
        missing = [k for k in ("status", "ease", "step") if k not in data]
        if missing:
            raise InvalidCardStateError(f"card state is missing {', '.join(missing)}")
        interval = data.get("interval")
        # JSON round-trips can turn whole numbers into floats
        if isinstance(interval, float) and interval.is_integer():
            interval = int(interval)
        return cls(
            status=data["status"],
            interval=interval,
            ease=data["ease"],
            step=data["step"],
        )


@dataclass
class Word:
    id: Optional[int]
    word: str
    definition: str
    state: CardState = field(default_factory=CardState)
    next_review_date: int = 0  # epoch milliseconds
    added_at: Optional[str] = None

    def is_due(self, now_ms: int) -> bool:
        return self.next_review_date <= now_ms

    def to_dict(self) -> dict:
        """Portable export shape, readable back through the importer."""
        return {
            "word": self.word,
            "definition": self.definition,
            "srsState": self.state.to_dict(),
            "nextReviewDate": self.next_review_date,
        }
