"""Interactive CLI application."""
import logging
import os
import sqlite3
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from vocab_trainer.db import DEFAULT_DB_PATH, init_db
from vocab_trainer.deck import (
    DeckError, add_word, find_word, get_all_words, get_deck_stats, get_due_words,
    get_setting, get_word_options, grade_word, now_ms, remove_word, reset_deck,
)
from vocab_trainer.importer import export_deck, import_file
from vocab_trainer.intervals import format_interval
from vocab_trainer.models import Status

console = Console()

EXIT_WORDS = ("q", "quit", "menu")

STATUS_COLORS = {
    Status.LEARNING: "yellow",
    Status.REVIEWING: "green",
    Status.RELEARNING: "red",
}


class SessionExitRequested(Exception):
    """Raised when the user types q or menu in the middle of a session."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = Prompt.ask(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return int(answer)


def setup_logging() -> None:
    level = os.environ.get("VOCAB_TRAINER_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def show_welcome(db_path: str):
    deck_name = get_setting(db_path, "deck_name")
    stats = get_deck_stats(db_path)
    subtitle = f"[dim]{deck_name}[/dim]\n" if deck_name else ""
    console.print(Panel(
        f"[bold]Vocabulary Trainer[/bold]\n{subtitle}"
        f"{stats['total']} words, [cyan]{stats['due']} due now[/cyan]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("review", "Review due words"),
        ("add", "Add a word"),
        ("import", "Load a word list (JSON, YAML, CSV)"),
        ("export", "Save the deck with progress"),
        ("words", "Show all words"),
        ("remove", "Remove a word"),
        ("reset", "Clear the deck"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<10}[/cyan] {desc}")


def run_review_session(db_path: str, words: list) -> int:
    """Review each word once. Returns the number of words graded."""
    if not words:
        console.print("[yellow]No words due right now![/yellow]")
        return 0
    console.print(f"\n[bold]Review Session[/bold] — {len(words)} words [dim](q to stop)[/dim]\n")
    graded = 0
    for i, word in enumerate(words, 1):
        console.print(Panel(f"[bold]{word.word}[/bold]", title=f"Word {i}/{len(words)}", border_style="cyan"))
        session_prompt("[dim]Press Enter to reveal definition[/dim]", default="", show_default=False)
        console.print(Panel(word.definition, border_style="green"))
        options = get_word_options(word)
        labels = "  ".join(
            f"[cyan]{n}[/cyan]) {o.grade.value} ({format_interval(o.display_interval)})"
            for n, o in enumerate(options, 1)
        )
        console.print(labels)
        choice = session_int_prompt("How well did you recall it?", choices=["1", "2", "3", "4"])
        option = options[choice - 1]
        grade_word(db_path, word.id, option.grade)
        graded += 1
        console.print()
    return graded


def cmd_review(db_path: str):
    words = get_due_words(db_path)
    try:
        graded = run_review_session(db_path, words)
    except SessionExitRequested:
        console.print("[dim]Session stopped.[/dim]")
        return
    if graded:
        console.print(f"[green]Reviewed {graded} words.[/green]")


def cmd_add(db_path: str):
    word = Prompt.ask("Word").strip()
    definition = Prompt.ask("Definition").strip()
    if not word or not definition:
        console.print("[red]Word and definition are both required.[/red]")
        return
    add_word(db_path, word, definition)
    console.print(f"[green]Added '{word}'.[/green]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    if get_all_words(db_path) and not Confirm.ask("This replaces the current deck. Continue?"):
        return
    result = import_file(db_path, file_path)
    if result["count"] == 0:
        console.print(f"[yellow]The file \"{result['filename']}\" is valid but contains no definitions.[/yellow]")
        return
    console.print(f"[green]Imported {result['count']} words from {result['filename']}[/green]")


def cmd_export(db_path: str):
    file_path = Prompt.ask("Export to", default="vocab_export.json")
    count = export_deck(db_path, file_path)
    console.print(f"[green]Exported {count} words to {file_path}[/green]")


def cmd_words(db_path: str):
    words = get_all_words(db_path)
    if not words:
        console.print("[yellow]The deck is empty. Use 'import' or 'add' first.[/yellow]")
        return
    now = now_ms()
    table = Table(title=get_setting(db_path, "deck_name") or "All Words")
    table.add_column("Word", style="bold")
    table.add_column("Definition")
    table.add_column("Status")
    table.add_column("Interval", justify="right")
    table.add_column("Ease", justify="right")
    table.add_column("Next Review")
    for w in words:
        color = STATUS_COLORS[w.state.status]
        interval = format_interval(w.state.interval) if w.state.interval else "N/A"
        if w.is_due(now):
            due = "[cyan]now[/cyan]"
        else:
            due = datetime.fromtimestamp(w.next_review_date / 1000).strftime("%Y-%m-%d %H:%M")
        table.add_row(
            w.word, w.definition, f"[{color}]{w.state.status.value}[/{color}]",
            interval, f"{w.state.ease:.2f}", due,
        )
    console.print(table)
    stats = get_deck_stats(db_path, now)
    console.print(f"\n  Total: [bold]{stats['total']}[/bold]  |  Due: [bold]{stats['due']}[/bold]  |  "
                  f"Learning: [bold]{stats['learning']}[/bold]  |  Reviewing: [bold]{stats['reviewing']}[/bold]  |  "
                  f"Relearning: [bold]{stats['relearning']}[/bold]")


def cmd_remove(db_path: str):
    word = find_word(db_path, Prompt.ask("Word to remove"))
    if word is None:
        console.print("[red]No such word in the deck.[/red]")
        return
    remove_word(db_path, word.id)
    console.print(f"[green]Removed '{word.word}'.[/green]")


def cmd_reset(db_path: str):
    if Confirm.ask("Clear every word and all progress?", default=False):
        reset_deck(db_path)
        console.print("[green]Deck cleared.[/green]")


COMMANDS = {
    "review": cmd_review,
    "add": cmd_add,
    "import": cmd_import,
    "export": cmd_export,
    "words": cmd_words,
    "remove": cmd_remove,
    "reset": cmd_reset,
}


def main():
    setup_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    show_welcome(db_path)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        try:
            if choice in COMMANDS:
                COMMANDS[choice](db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]See you next review![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except (DeckError, ValueError, OSError, sqlite3.Error) as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
