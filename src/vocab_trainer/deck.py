"""Deck storage and review grading on top of the scheduler."""
import logging
import random
import time
from datetime import datetime
from typing import Iterable, Optional

from vocab_trainer.db import get_connection
from vocab_trainer.models import CardState, Status, Word
from vocab_trainer.scheduler import Grade, ReviewOption, new_card, options

logger = logging.getLogger(__name__)


class DeckError(Exception):
    """Base class for deck storage errors."""


class WordNotFoundError(DeckError):
    pass


class DuplicateWordError(DeckError):
    pass


def now_ms() -> int:
    return int(time.time() * 1000)


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def _row_to_word(row) -> Word:
    state = CardState.from_dict({
        "status": row["status"],
        "interval": row["interval"],
        "ease": row["ease"],
        "step": row["step"],
    })
    return Word(
        id=row["id"],
        word=row["word"],
        definition=row["definition"],
        state=state,
        next_review_date=row["next_review_date"],
        added_at=row["added_at"],
    )


def _insert_word(conn, word: str, definition: str, state: CardState, next_review_date: int) -> int:
    cursor = conn.execute(
        """INSERT INTO words (word, definition, status, interval, ease, step, next_review_date, added_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (word, definition, state.status.value, state.interval, state.ease, state.step,
         next_review_date, datetime.now().isoformat()),
    )
    return cursor.lastrowid


def add_word(db_path: str, word: str, definition: str, now: Optional[int] = None) -> int:
    """Add a word as a fresh card that is due immediately."""
    word, definition = word.strip(), definition.strip()
    if not word or not definition:
        raise ValueError("word and definition must not be empty")
    now = now_ms() if now is None else now
    conn = get_connection(db_path)
    existing = conn.execute("SELECT id FROM words WHERE word = ?", (word,)).fetchone()
    if existing:
        conn.close()
        raise DuplicateWordError(f"'{word}' is already in the deck")
    word_id = _insert_word(conn, word, definition, new_card(), now)
    conn.commit()
    conn.close()
    logger.debug("Added word %r (id=%s)", word, word_id)
    return word_id


def load_words(db_path: str, items: Iterable[dict], deck_name: str | None = None,
               now: Optional[int] = None) -> int:
    """Replace the deck with ``items``.

    Each item needs ``word`` and ``definition``; items may also carry a
    normalized ``state`` and ``next_review_date`` to keep earlier progress.
    Later duplicates of a word are skipped.
    """
    now = now_ms() if now is None else now
    conn = get_connection(db_path)
    seen = set()
    count = 0
    try:
        conn.execute("DELETE FROM review_log")
        conn.execute("DELETE FROM words")
        for item in items:
            word = item["word"].strip()
            if word in seen:
                logger.warning("Skipping duplicate word %r", word)
                continue
            seen.add(word)
            state = item.get("state") or new_card()
            next_review_date = item.get("next_review_date", now)
            _insert_word(conn, word, item["definition"].strip(), state, next_review_date)
            count += 1
        if deck_name:
            conn.execute(
                "INSERT INTO user_settings (key, value) VALUES ('deck_name', ?) ON CONFLICT(key) DO UPDATE SET value=?",
                (deck_name, deck_name),
            )
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    logger.info("Loaded %d words into deck %r", count, deck_name)
    return count


def get_word(db_path: str, word_id: int) -> Word | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM words WHERE id = ?", (word_id,)).fetchone()
    conn.close()
    return _row_to_word(row) if row else None


def find_word(db_path: str, word: str) -> Word | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM words WHERE word = ?", (word.strip(),)).fetchone()
    conn.close()
    return _row_to_word(row) if row else None


def get_all_words(db_path: str) -> list[Word]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM words ORDER BY id").fetchall()
    conn.close()
    return [_row_to_word(r) for r in rows]


def get_due_words(db_path: str, now: Optional[int] = None, limit: int | None = None,
                  shuffle: bool = True) -> list[Word]:
    """Words whose next review date has passed, in random order by default."""
    now = now_ms() if now is None else now
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM words WHERE next_review_date <= ? ORDER BY next_review_date, id",
        (now,),
    ).fetchall()
    conn.close()
    words = [_row_to_word(r) for r in rows]
    if shuffle:
        random.shuffle(words)
    if limit is not None:
        words = words[:limit]
    return words


def get_word_options(word: Word) -> list[ReviewOption]:
    return options(word.state)


def grade_word(db_path: str, word_id: int, grade: Grade | str, now: Optional[int] = None) -> Word:
    """Apply a grade to a stored word and schedule its next review.

    The read, update and log insert happen in one transaction so two
    gradings of the same word cannot interleave.
    """
    grade = Grade(grade)
    now = now_ms() if now is None else now
    conn = get_connection(db_path)
    try:
        conn.execute("BEGIN IMMEDIATE")
        row = conn.execute("SELECT * FROM words WHERE id = ?", (word_id,)).fetchone()
        if row is None:
            raise WordNotFoundError(f"no word with id {word_id}")
        word = _row_to_word(row)
        option = next(o for o in options(word.state) if o.grade is grade)
        state = option.next_state
        next_review_date = now + (state.interval or 0)
        conn.execute(
            """UPDATE words SET status=?, interval=?, ease=?, step=?, next_review_date=?
            WHERE id=?""",
            (state.status.value, state.interval, state.ease, state.step, next_review_date, word_id),
        )
        conn.execute(
            "INSERT INTO review_log (word_id, grade, interval, ease, reviewed_at) VALUES (?, ?, ?, ?, ?)",
            (word_id, grade.value, state.interval, state.ease, datetime.now().isoformat()),
        )
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    logger.debug(
        "Graded %r as %s: %s -> %s, interval=%s",
        word.word, grade.value, word.state.status.value, state.status.value, state.interval,
    )
    word.state = state
    word.next_review_date = next_review_date
    return word


def remove_word(db_path: str, word_id: int) -> bool:
    conn = get_connection(db_path)
    cursor = conn.execute("DELETE FROM words WHERE id = ?", (word_id,))
    conn.commit()
    conn.close()
    return cursor.rowcount > 0


def reset_deck(db_path: str) -> None:
    """Clear every word, its review history and the remembered deck name."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM review_log")
    conn.execute("DELETE FROM words")
    conn.execute("DELETE FROM user_settings WHERE key = 'deck_name'")
    conn.commit()
    conn.close()
    logger.info("Deck reset")


def get_deck_stats(db_path: str, now: Optional[int] = None) -> dict:
    now = now_ms() if now is None else now
    conn = get_connection(db_path)
    total = conn.execute("SELECT COUNT(*) FROM words").fetchone()[0]
    due = conn.execute("SELECT COUNT(*) FROM words WHERE next_review_date <= ?", (now,)).fetchone()[0]
    by_status = {
        r["status"]: r["n"]
        for r in conn.execute("SELECT status, COUNT(*) as n FROM words GROUP BY status").fetchall()
    }
    reviews = conn.execute("SELECT COUNT(*) FROM review_log").fetchone()[0]
    conn.close()
    return {
        "total": total,
        "due": due,
        "learning": by_status.get(Status.LEARNING.value, 0),
        "reviewing": by_status.get(Status.REVIEWING.value, 0),
        "relearning": by_status.get(Status.RELEARNING.value, 0),
        "reviews": reviews,
    }
