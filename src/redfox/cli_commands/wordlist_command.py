"""Wordlist CLI commands: generate and list-wordlists."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from redfox.errors import RedFoxError
from redfox.modules.credentials import generate_wordlist, list_available, load_wordlist
from redfox.modules.credentials.defaults import BUILTIN_COMBOS, BUILTIN_WORDLISTS

from .shared import app, console, fail_with, load_settings


@app.command()
def generate(
    output: Path = typer.Option(..., "--output", "-o", help="File to write"),
    size: int = typer.Option(1000, "--size", "-s", help="Maximum number of words"),
    base: str | None = typer.Option(None, "--base", help="Base words (file or comma list) to mutate"),
    charset: str = typer.Option("digits", "--charset", help="Charset when no base words are given"),
    min_length: int = typer.Option(1, "--min-length", help="Minimum generated length"),
    max_length: int = typer.Option(4, "--max-length", help="Maximum generated length"),
) -> None:
    """Generate a password wordlist."""
    config = load_settings()
    try:
        base_words = load_wordlist(base, config.wordlists.search_paths, role="base list") if base else []
        words = generate_wordlist(
            size,
            base_words=base_words,
            charset=charset,
            min_length=min_length,
            max_length=max_length,
        )
    except RedFoxError as exc:
        fail_with(exc)

    output = output.expanduser()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text("\n".join(words) + "\n", encoding="utf-8")
    console.print(f"[green]Wrote {len(words)} words to[/green] {output}")


@app.command("list-wordlists")
def list_wordlists() -> None:
    """List built-in wordlists and files in the configured search paths."""
    config = load_settings()
    table = Table(title="Wordlists")
    table.add_column("Name")
    table.add_column("Entries", justify="right")
    table.add_column("Source", style="dim")

    for name, entries in BUILTIN_WORDLISTS.items():
        table.add_row(name, str(len(entries)), "built-in")
    for name, combos in BUILTIN_COMBOS.items():
        table.add_row(name, str(len(combos)), "built-in combos")
    for path in list_available(config.wordlists.search_paths):
        with open(path, encoding="utf-8", errors="ignore") as f:
            count = sum(1 for line in f if line.strip() and not line.startswith("#"))
        table.add_row(path.name, str(count), str(path.parent))
    console.print(table)
