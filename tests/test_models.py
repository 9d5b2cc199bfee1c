"""Tests for card state and word data classes."""
import json

import pytest

from vocab_trainer.models import CardState, InvalidCardStateError, Status, Word


def test_card_state_defaults():
    s = CardState()
    assert s.status is Status.LEARNING
    assert s.interval is None
    assert s.ease == 2.5
    assert s.step == 0


def test_card_state_accepts_status_string():
    s = CardState(status="reviewing", interval=1000)
    assert s.status is Status.REVIEWING


def test_card_state_clamps_low_ease():
    assert CardState(ease=1.0).ease == 1.3


def test_card_state_rejects_unknown_status():
    with pytest.raises(InvalidCardStateError):
        CardState(status="graduated")


def test_card_state_rejects_negative_interval():
    with pytest.raises(InvalidCardStateError):
        CardState(status=Status.REVIEWING, interval=-1)


def test_card_state_rejects_negative_step():
    with pytest.raises(InvalidCardStateError):
        CardState(step=-1)


def test_card_state_rejects_step_outside_learning():
    with pytest.raises(InvalidCardStateError):
        CardState(status=Status.REVIEWING, interval=1000, step=1)


def test_invalid_card_state_is_value_error():
    assert issubclass(InvalidCardStateError, ValueError)


def test_from_dict_clamps_ease():
    s = CardState.from_dict({"status": "reviewing", "interval": 86400000, "ease": 1.0, "step": 0})
    assert s.ease == 1.3


def test_from_dict_missing_field():
    with pytest.raises(InvalidCardStateError):
        CardState.from_dict({"status": "learning", "interval": None})


def test_json_round_trip_is_equal():
    s = CardState(status=Status.RELEARNING, interval=600000, ease=2.3)
    restored = CardState.from_dict(json.loads(json.dumps(s.to_dict())))
    assert restored == s


def test_word_to_dict_export_shape():
    w = Word(id=1, word="ubiquitous", definition="found everywhere", next_review_date=123)
    assert w.to_dict() == {
        "word": "ubiquitous",
        "definition": "found everywhere",
        "srsState": {"status": "learning", "interval": None, "ease": 2.5, "step": 0},
        "nextReviewDate": 123,
    }


def test_word_is_due():
    w = Word(id=1, word="a", definition="b", next_review_date=1000)
    assert w.is_due(1000)
    assert not w.is_due(999)


@pytest.mark.parametrize("ease", [float("nan"), float("inf"), float("-inf")])
def test_card_state_rejects_non_finite_ease(ease):
    with pytest.raises(InvalidCardStateError):
        CardState(status=Status.REVIEWING, interval=1000, ease=ease)


def test_from_dict_rejects_nan_ease_from_json():
    data = json.loads('{"status": "reviewing", "interval": 86400000, "ease": NaN, "step": 0}')
    with pytest.raises(InvalidCardStateError):
        CardState.from_dict(data)


@pytest.mark.parametrize("step", [1.0, 0.0, "1"])
def test_card_state_rejects_non_integer_step(step):
    with pytest.raises(InvalidCardStateError):
        CardState(step=step)
