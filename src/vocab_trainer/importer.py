"""Import word lists from files and export the deck with its progress."""
import csv
import json
import logging
from pathlib import Path

from vocab_trainer.deck import get_all_words, load_words, now_ms
from vocab_trainer.migrate import normalize

logger = logging.getLogger(__name__)


class ImportFormatError(ValueError):
    """Raised when a file does not hold a list of word/definition entries."""


def _read_structured(path: Path) -> object:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        import yaml
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ImportFormatError(f"Failed to parse YAML file: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Failed to parse JSON file: {e}") from e


def _read_delimited(path: Path) -> list[dict]:
    delimiter = "\t" if path.suffix.lower() == ".tsv" else ","
    entries = []
    with path.open(newline="", encoding="utf-8") as f:
        for row in csv.reader(f, delimiter=delimiter):
            if not row or all(not cell.strip() for cell in row):
                continue
            if len(row) < 2:
                raise ImportFormatError(f"Expected word{delimiter}definition, got {row!r}")
            entries.append({"word": row[0], "definition": delimiter.join(row[1:])})
    # header row
    if entries and (entries[0]["word"].strip().lower(), entries[0]["definition"].strip().lower()) == ("word", "definition"):
        entries = entries[1:]
    return entries


def _validate(data) -> list[dict]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ImportFormatError("Expected a list of entries with non-empty 'word' and 'definition'.")
    for i, item in enumerate(data):
        if not (
            isinstance(item, dict)
            and isinstance(item.get("word"), str) and item["word"].strip()
            and isinstance(item.get("definition"), str) and item["definition"].strip()
        ):
            raise ImportFormatError(
                f"Entry {i + 1} needs non-empty string 'word' and 'definition' fields."
            )
    return data


def read_pairs(file_path: str) -> list[dict]:
    """Read raw word entries from a JSON, YAML, CSV or TSV file."""
    path = Path(file_path)
    if path.suffix.lower() in (".csv", ".tsv", ".txt"):
        return _validate(_read_delimited(path))
    return _validate(_read_structured(path))


def import_file(db_path: str, file_path: str) -> dict:
    """Replace the deck with the entries in ``file_path``.

    Entries exported with scheduling state keep their progress; plain
    word/definition pairs start as new cards due now.
    """
    entries = read_pairs(file_path)
    now = now_ms()
    items = [item for item in (normalize(e, now) for e in entries) if item is not None]
    name = Path(file_path).name
    count = load_words(db_path, items, deck_name=name, now=now)
    logger.info("Imported %d words from %s", count, name)
    return {"filename": name, "count": count}


def export_deck(db_path: str, file_path: str) -> int:
    """Write every word with its scheduling state to a JSON file."""
    words = get_all_words(db_path)
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([w.to_dict() for w in words], indent=2), encoding="utf-8")
    logger.info("Exported %d words to %s", len(words), path)
    return len(words)
