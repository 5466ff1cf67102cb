import json
from unittest.mock import MagicMock, patch

import httpx
import pytest
from typer.testing import CliRunner

from main import app
from utils.ui_helpers import OUTPUT_MODE_ENV

runner = CliRunner()


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)


def test_list_no_books(lib):
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "No books in library." in result.stdout


def test_add_and_list(lib):
    result = runner.invoke(app, ["add", "Dune", "Frank Herbert"])
    assert result.exit_code == 0
    assert "Successfully added: #1 Dune by Frank Herbert" in result.stdout

    result = runner.invoke(app, ["list"])
    assert "#1 Dune by Frank Herbert [available]" in result.stdout


def test_list_json_output(lib):
    lib.add_book("Dune", "Frank Herbert")

    result = runner.invoke(app, ["--output", "json", "list"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)[0]["title"] == "Dune"


def test_add_blank_title_fails(lib):
    result = runner.invoke(app, ["add", " ", "Someone"])
    assert result.exit_code == 1
    assert "Error: Title and author are required" in result.stdout


def test_show_book(lib):
    lib.add_book("Dune", "Frank Herbert")

    result = runner.invoke(app, ["show", "1"])
    assert result.exit_code == 0
    assert "Title: Dune" in result.stdout
    assert "Author: Frank Herbert" in result.stdout


def test_show_book_not_found(lib):
    result = runner.invoke(app, ["show", "42"])
    assert result.exit_code == 1
    assert "Book 42 not found." in result.stdout


def test_update_keeps_other_fields(lib):
    lib.add_book("Dune", "Frank Herbert")

    result = runner.invoke(app, ["update", "1", "--status", "unavailable", "--due-date", "2030-01-01"])
    assert result.exit_code == 0
    book = lib.find_book(1)
    assert book.status == "unavailable"
    assert book.due_date == "2030-01-01"
    assert book.title == "Dune"

    result = runner.invoke(app, ["update", "1", "--status", "available", "--clear-due-date"])
    assert result.exit_code == 0
    assert lib.find_book(1).due_date is None


def test_update_without_changes(lib):
    lib.add_book("Dune", "Frank Herbert")
    result = runner.invoke(app, ["update", "1"])
    assert result.exit_code == 1
    assert "Nothing to update." in result.stdout


def test_reserve_book(lib):
    lib.add_book("Dune", "Frank Herbert")

    result = runner.invoke(app, ["reserve", "1", "--days", "7"])
    assert result.exit_code == 0
    assert '"Dune" is reserved until' in result.stdout
    assert lib.find_book(1).status == "unavailable"

    result = runner.invoke(app, ["reserve", "1"])
    assert result.exit_code == 1
    assert "already reserved" in result.stdout


def test_remove_book(lib):
    lib.add_book("To Be Removed", "Remover")

    result = runner.invoke(app, ["remove", "1"])
    assert result.exit_code == 0
    assert "Book 1 has been removed." in result.stdout

    result = runner.invoke(app, ["remove", "1"])
    assert result.exit_code == 1
    assert "Book 1 not found." in result.stdout


def test_stats(lib):
    lib.add_book("A", "One")
    lib.add_book("B", "Two", status="unavailable")

    result = runner.invoke(app, ["stats"])
    assert result.exit_code == 0
    assert "Total Books: 2" in result.stdout
    assert "Unavailable: 1" in result.stdout


def test_health_reports_server_status(lib, monkeypatch):
    response = httpx.Response(
        200,
        json={"status": "OK", "booksCount": 3},
        request=httpx.Request("GET", "http://testserver/api/health"),
    )
    get_mock = MagicMock(return_value=response)
    monkeypatch.setattr("main.httpx.get", get_mock)

    result = runner.invoke(app, ["health", "--url", "http://testserver/"])
    assert result.exit_code == 0
    assert "Status: OK" in result.stdout
    assert "Books in memory: 3" in result.stdout
    assert get_mock.call_args[0][0] == "http://testserver/api/health"


def test_health_server_down(lib, monkeypatch):
    def fake_get(url, timeout=5.0):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr("main.httpx.get", fake_get)
    result = runner.invoke(app, ["health"])
    assert result.exit_code == 1
    assert "Server unreachable" in result.stdout


@patch("subprocess.run")
def test_serve_command(mock_subprocess_run, lib):
    result = runner.invoke(app, ["serve", "--port", "4000"])
    assert result.exit_code == 0
    assert "Starting server on" in result.stdout
    mock_subprocess_run.assert_called_once()
    args = mock_subprocess_run.call_args[0][0]
    assert "uvicorn" in args
    assert "api:app" in args
    assert "4000" in args
