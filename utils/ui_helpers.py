import json
import os
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _status_label(book: Any) -> str:
    if getattr(book, "due_date", None) and not book.is_available:
        return f"{book.status} (due {str(book.due_date)[:10]})"
    return book.status


def print_list_result(books: List[Any]) -> None:
    """Print the catalog in the current output mode.
    - plain: '#ID Title by Author [status]' lines, or 'No books in library.'
    - json: JSON array of book records
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in library.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Status", style="green")
        for b in books:
            table.add_row(str(b.id), b.title, b.author, _status_label(b))
        _console.print(table)
    else:
        for b in books:
            print(f"#{b.id} {b.title} by {b.author} [{_status_label(b)}]")


def print_book_result(book: Any) -> None:
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Title:[/] {book.title}\n"
            f"[bold]Author:[/] {book.author}\n"
            f"[bold]Status:[/] {_status_label(book)}\n"
            f"[bold]Cover:[/] {book.cover}"
        )
        _console.print(Panel.fit(content, title=f"📖 Book #{book.id}", border_style="green"))
    else:
        print(f"ID: {book.id}")
        print(f"Title: {book.title}")
        print(f"Author: {book.author}")
        print(f"Status: {book.status}")
        print(f"Due Date: {book.due_date or '-'}")
        print(f"Cover: {book.cover}")


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print catalog statistics in the current output mode."""
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    total = stats.get("total_books", 0)
    available = stats.get("available", 0)
    unavailable = stats.get("unavailable", 0)
    authors = stats.get("unique_authors", 0)

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Total Books:[/] {total}\n"
            f"[bold]Available:[/] {available}\n"
            f"[bold]Unavailable:[/] {unavailable}\n"
            f"[bold]Unique Authors:[/] {authors}"
        )
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Books: {total}")
        print(f"Available: {available}")
        print(f"Unavailable: {unavailable}")
        print(f"Unique Authors: {authors}")
