import json

import pytest

from swipestudy.infrastructure.adapters.json_store import JsonFileStore, MemoryStore


def test_missing_file_reads_none(tmp_path):
    store = JsonFileStore(tmp_path / "store.json")
    assert store.read("cards") is None


def test_write_creates_file_and_parents(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(path)

    store.write("cards", [{"id": "a"}])
    store.write("folders", [])

    assert json.loads(path.read_text(encoding="utf-8")) == {"cards": [{"id": "a"}], "folders": []}
    assert list(path.parent.glob(".store-*")) == []


def test_reopen_sees_written_data(tmp_path):
    path = tmp_path / "store.json"
    JsonFileStore(path).write("cards", [{"id": "ü"}])
    assert JsonFileStore(path).read("cards") == [{"id": "ü"}]


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        JsonFileStore(path).read("cards")


def test_non_object_file_starts_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert JsonFileStore(path).read("cards") is None


def test_memory_store_counts_writes():
    store = MemoryStore({"cards": []})
    store.write("cards", [1])
    assert store.read("cards") == [1]
    assert store.writes == 1
