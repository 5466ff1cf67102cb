import json

import pytest

from cache_manager import CatalogCache
from store import JsonFileStore, StoreError


def test_write_uses_two_space_indent(tmp_path):
    store = JsonFileStore(tmp_path / "books.json")
    records = [{"id": 1, "title": "Dune", "author": "Frank Herbert"}]

    store.write(records)

    assert store.path.read_text(encoding="utf-8") == json.dumps(records, indent=2)
    assert store.read() == records


def test_read_missing_file(tmp_path):
    store = JsonFileStore(tmp_path / "nope.json")
    assert store.exists() is False
    with pytest.raises(StoreError):
        store.read()


@pytest.mark.parametrize("content", ["{broken", '{"id": 1}', "[1, 2]"])
def test_read_rejects_bad_content(tmp_path, content):
    path = tmp_path / "books.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(StoreError):
        JsonFileStore(path).read()


def test_write_into_missing_directory_fails(tmp_path):
    store = JsonFileStore(tmp_path / "missing" / "books.json")
    with pytest.raises(StoreError):
        store.write([])


def test_cache_snapshot_is_a_copy():
    cache = CatalogCache([{"id": 1, "title": "A"}])

    snap = cache.snapshot()
    snap[0]["title"] = "changed"
    snap.append({"id": 2})

    assert cache.snapshot() == [{"id": 1, "title": "A"}]
    assert len(cache) == 1


def test_cache_replace_and_stats():
    cache = CatalogCache()
    assert cache.is_empty()

    cache.replace([{"id": 1}, {"id": 2}])

    stats = cache.get_stats()
    assert stats["size"] == 2
    assert stats["replacements"] == 1
    assert stats["last_replaced_at"] is not None

    cache.clear()
    assert cache.is_empty()
