"""Normalization of stored or exported deck items into valid scheduling state.

Older exports stored a plain ``status`` of "known"/"unknown" per word; newer
ones carry an ``srsState`` object and a ``nextReviewDate`` timestamp. Anything
that cannot be read as a valid state is reset to a fresh card due now.
"""
import logging
from typing import Optional

from vocab_trainer.intervals import DAY_MS
from vocab_trainer.models import CardState, InvalidCardStateError, Status
from vocab_trainer.scheduler import new_card

logger = logging.getLogger(__name__)


def _has_text(value) -> bool:
    return isinstance(value, str) and value.strip() != ""


def normalize(raw_item, now_ms: int) -> Optional[dict]:
    """Turn one raw item into ``{"word", "definition", "state", "next_review_date"}``.

    Returns None for items without a usable word and definition.
    """
    if not isinstance(raw_item, dict):
        logger.warning("Dropping non-object deck item: %r", raw_item)
        return None
    word = raw_item.get("word")
    definition = raw_item.get("definition")
    if not (_has_text(word) and _has_text(definition)):
        logger.warning("Dropping deck item without word/definition: %r", raw_item)
        return None

    raw_state = raw_item.get("srsState")
    next_review = raw_item.get("nextReviewDate")
    if raw_state is not None and isinstance(next_review, (int, float)) and not isinstance(next_review, bool):
        try:
            state = CardState.from_dict(raw_state)
        except (InvalidCardStateError, TypeError, AttributeError) as e:
            logger.warning("Resetting corrupted state for %r: %s", word, e)
            state = new_card()
            next_review = now_ms
        return {"word": word, "definition": definition, "state": state, "next_review_date": int(next_review)}

    # legacy format
    if raw_item.get("status") == "known":
        state = CardState(status=Status.REVIEWING, interval=DAY_MS)
    else:
        state = new_card()
    return {"word": word, "definition": definition, "state": state, "next_review_date": now_ms}
