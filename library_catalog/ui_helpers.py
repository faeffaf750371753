import json
import os
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from library_catalog.config import settings

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"
OUTPUT_MODES = {"plain", "json", "rich"}

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in OUTPUT_MODES:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    mode = os.environ.get(OUTPUT_MODE_ENV, settings.cli_output).lower()
    return mode if mode in OUTPUT_MODES else "plain"


def print_books(books: List[Any], title: str = "Books") -> None:
    """Print books in the current output mode.
    - plain: one 'ISBN: ..., Title: ..., Author: ..., Available: Yes|No' line per book
    - json: JSON array of book dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books found.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=f"📚 {escape(title)}", show_lines=True, header_style="bold cyan")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Available", justify="center")
        for b in books:
            table.add_row(escape(b.isbn), escape(b.title), escape(b.author), "[green]Yes[/]" if b.available else "[red]No[/]")
        _console.print(table)
    else:
        print(f"{title} ({len(books)}):")
        for b in books:
            print(b.display())


def print_patrons(patrons: List[Any], title: str = "Users") -> None:
    mode = get_output_mode()

    if not patrons:
        print("No patrons found.")
        return

    if mode == "json":
        print(json.dumps([p.to_dict() for p in patrons], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=f"👤 {escape(title)}", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Borrowed", style="white")
        for p in patrons:
            table.add_row(escape(p.id), escape(p.name), escape(", ".join(p.list_borrowed()) or "-"))
        _console.print(table)
    else:
        print(f"{title} ({len(patrons)}):")
        for p in patrons:
            print(p.display())


def print_stats(stats: Dict[str, Any]) -> None:
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    labels = {
        "total_books": "Total Books",
        "available_books": "Available Books",
        "borrowed_books": "Borrowed Books",
        "unique_authors": "Unique Authors",
        "total_patrons": "Total Patrons",
        "active_patrons": "Patrons With Loans",
    }

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {stats.get(key, 0)}" for key, label in labels.items())
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for key, label in labels.items():
            print(f"{label}: {stats.get(key, 0)}")
