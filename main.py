import subprocess
import sys
from typing import Optional

import httpx
import typer

from config import configure_logging, settings
from library import Library
from utils.ui_helpers import print_book_result, print_list_result, print_stats_result, set_output_mode

APP_NAME = "Library CLI"


class LibraryManager:
    """Holds the single Library used by CLI commands."""
    _instance: Optional[Library] = None

    @classmethod
    def get_instance(cls) -> Library:
        if cls._instance is None:
            cls._instance = Library()
        return cls._instance

    @classmethod
    def set_instance(cls, library: Optional[Library]) -> None:
        cls._instance = library


app = typer.Typer(help=APP_NAME)


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level, e.g. DEBUG"),
):
    """Global CLI options."""
    configure_logging(log_level.upper() if log_level else "WARNING")
    if output:
        set_output_mode(output)


@app.command("list")
def cli_list():
    """List every book in the catalog."""
    print_list_result(LibraryManager.get_instance().list_books())


@app.command("show")
def cli_show(book_id: int):
    """Show one book."""
    book = LibraryManager.get_instance().find_book(book_id)
    if not book:
        print(f"Book {book_id} not found.")
        raise typer.Exit(code=1)
    print_book_result(book)


@app.command("add")
def cli_add(
    title: str,
    author: str,
    status: Optional[str] = typer.Option(None, "--status", help="available | unavailable"),
    due_date: Optional[str] = typer.Option(None, "--due-date", help="Due date, e.g. 2024-05-01"),
    cover: Optional[str] = typer.Option(None, "--cover", help="Cover image URL"),
):
    """Add a book to the catalog."""
    try:
        book = LibraryManager.get_instance().add_book(title, author, status=status, due_date=due_date, cover=cover)
    except ValueError as e:
        print(f"Error: {e}")
        raise typer.Exit(code=1)
    print(f"Successfully added: #{book.id} {book.title} by {book.author}")


@app.command("update")
def cli_update(
    book_id: int,
    title: Optional[str] = typer.Option(None, "--title"),
    author: Optional[str] = typer.Option(None, "--author"),
    status: Optional[str] = typer.Option(None, "--status"),
    due_date: Optional[str] = typer.Option(None, "--due-date"),
    clear_due_date: bool = typer.Option(False, "--clear-due-date", help="Reset the due date to empty"),
    cover: Optional[str] = typer.Option(None, "--cover"),
):
    """Change selected fields of a book; the others are kept."""
    changes = {
        key: value
        for key, value in {
            "title": title,
            "author": author,
            "status": status,
            "dueDate": due_date,
            "cover": cover,
        }.items()
        if value is not None
    }
    if clear_due_date:
        changes["dueDate"] = None
    if not changes:
        print("Nothing to update.")
        raise typer.Exit(code=1)

    book = LibraryManager.get_instance().update_book(book_id, changes)
    if not book:
        print(f"Book {book_id} not found.")
        raise typer.Exit(code=1)
    print_book_result(book)


@app.command("reserve")
def cli_reserve(
    book_id: int,
    days: int = typer.Option(settings.reservation_days, "--days", help="Loan length in days"),
):
    """Mark a book unavailable with a due date."""
    lib = LibraryManager.get_instance()
    book = lib.find_book(book_id)
    if not book:
        print(f"Book {book_id} not found.")
        raise typer.Exit(code=1)
    if not book.is_available:
        print(f'"{book.title}" is already reserved.')
        raise typer.Exit(code=1)
    book = lib.reserve_book(book_id, days=days)
    print(f'"{book.title}" is reserved until {book.due_date[:10]}.')


@app.command("remove")
def cli_remove(book_id: int):
    """Delete a book."""
    if LibraryManager.get_instance().remove_book(book_id):
        print(f"Book {book_id} has been removed.")
    else:
        print(f"Book {book_id} not found.")
        raise typer.Exit(code=1)


@app.command("stats")
def cli_stats():
    """Catalog statistics."""
    print_stats_result(LibraryManager.get_instance().get_statistics())


@app.command("health")
def cli_health(
    url: str = typer.Option(f"http://{settings.host}:{settings.port}", "--url", help="Base URL of a running server"),
    timeout: float = typer.Option(5.0, "--timeout"),
):
    """Ask a running server for its health status."""
    try:
        resp = httpx.get(f"{url.rstrip('/')}/api/health", timeout=timeout)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        print(f"Server unreachable: {e}")
        raise typer.Exit(code=1)
    data = resp.json()
    print(f"Status: {data.get('status')}")
    print(f"Books in memory: {data.get('booksCount')}")


@app.command("serve")
def cli_serve(
    host: str = typer.Option(settings.host, "--host"),
    port: int = typer.Option(settings.port, "--port"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Start the web server with uvicorn."""
    print(f"Starting server on http://{host}:{port}/")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "api:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        args.append("--reload")
    subprocess.run(args)


if __name__ == "__main__":
    app()
