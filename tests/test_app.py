import pytest
from unittest.mock import patch

from vocab_trainer.app import (
    SessionExitRequested, cmd_add, cmd_remove, cmd_review, cmd_words,
    run_review_session, session_int_prompt, session_prompt,
)
from vocab_trainer.db import init_db
from vocab_trainer.deck import find_word, get_all_words, load_words
from vocab_trainer.intervals import DAY_MS, MINUTE_MS
from vocab_trainer.models import Status

PAIRS = [
    {"word": "aloof", "definition": "distant"},
    {"word": "brusque", "definition": "abrupt"},
]


def _seeded(tmp_db):
    init_db(tmp_db)
    load_words(tmp_db, PAIRS, deck_name="test.json", now=0)
    return tmp_db


def test_session_prompt_raises_on_q():
    with patch("vocab_trainer.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("vocab_trainer.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("vocab_trainer.app.Prompt.ask", return_value="hello"):
        assert session_prompt("test prompt") == "hello"


def test_session_int_prompt_returns_normal_input():
    with patch("vocab_trainer.app.Prompt.ask", return_value="3"):
        assert session_int_prompt("rate", choices=["1", "2", "3", "4"]) == 3


def test_run_review_session_applies_chosen_grades(tmp_db):
    _seeded(tmp_db)
    words = sorted(get_all_words(tmp_db), key=lambda w: w.word)
    # aloof: reveal, Good (3). brusque: reveal, Easy (4).
    with patch("vocab_trainer.app.Prompt.ask", side_effect=["", "3", "", "4"]):
        graded = run_review_session(tmp_db, words)
    assert graded == 2
    aloof = find_word(tmp_db, "aloof")
    assert aloof.state.status is Status.LEARNING
    assert aloof.state.interval == 10 * MINUTE_MS
    brusque = find_word(tmp_db, "brusque")
    assert brusque.state.status is Status.REVIEWING
    assert brusque.state.interval == 4 * DAY_MS


def test_run_review_session_exits_on_q(tmp_db):
    """Typing q on the second word's reveal keeps the first grade."""
    _seeded(tmp_db)
    words = sorted(get_all_words(tmp_db), key=lambda w: w.word)
    with patch("vocab_trainer.app.Prompt.ask", side_effect=["", "1", "q"]):
        with pytest.raises(SessionExitRequested):
            run_review_session(tmp_db, words)
    assert find_word(tmp_db, "aloof").state.interval == MINUTE_MS
    assert find_word(tmp_db, "brusque").state.interval is None


def test_run_review_session_with_no_words(tmp_db):
    init_db(tmp_db)
    assert run_review_session(tmp_db, []) == 0


def test_cmd_review_swallows_exit(tmp_db):
    _seeded(tmp_db)
    with patch("vocab_trainer.app.Prompt.ask", return_value="q"):
        cmd_review(tmp_db)  # should not raise


def test_cmd_add_and_remove(tmp_db):
    init_db(tmp_db)
    with patch("vocab_trainer.app.Prompt.ask", side_effect=["aloof", "distant"]):
        cmd_add(tmp_db)
    assert find_word(tmp_db, "aloof") is not None
    with patch("vocab_trainer.app.Prompt.ask", return_value="aloof"):
        cmd_remove(tmp_db)
    assert find_word(tmp_db, "aloof") is None


def test_cmd_words_renders_table(tmp_db, capsys):
    _seeded(tmp_db)
    cmd_words(tmp_db)
    out = capsys.readouterr().out
    assert "aloof" in out
    assert "learning" in out
