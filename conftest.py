import json

import pytest
from fastapi.testclient import TestClient

from api import create_app
from cache_manager import CatalogCache
from library import Library
from main import LibraryManager
from store import JsonFileStore


@pytest.fixture
def books_file(tmp_path):
    # Each test gets its own, initially empty, books file
    path = tmp_path / "books.json"
    path.write_text("[]", encoding="utf-8")
    return path


@pytest.fixture
def lib(books_file):
    lib = Library(store=JsonFileStore(books_file), cache=CatalogCache())
    LibraryManager.set_instance(lib)
    yield lib
    LibraryManager.set_instance(None)


@pytest.fixture
def client(lib, tmp_path):
    pages = tmp_path / "public"
    pages.mkdir()
    for name in ("index.html", "newbook.html", "test.html"):
        (pages / name).write_text(f"<html><body>{name}</body></html>", encoding="utf-8")

    app = create_app(library=lib, static_dir=str(pages))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def read_books_file(books_file):
    def _read():
        return json.loads(books_file.read_text(encoding="utf-8"))
    return _read
