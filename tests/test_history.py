"""Tests for the bounded interview history and its JSON file."""
from __future__ import annotations

import json
from datetime import date, datetime

import pytest  # type: ignore[import-not-found]

import history
from history import HISTORY_LIMIT, HistoryError, HistoryItem, HistoryStore, add_item, export_filename, to_json


def _item(n: int) -> HistoryItem:
    return HistoryItem(id=n, question=f"q{n}", suggestion=f"a{n}", timestamp="t")


@pytest.fixture
def store(tmp_path):
    return HistoryStore(str(tmp_path / "history.json"))


def test_create_uses_epoch_millis_and_readable_timestamp():
    now = datetime(2024, 3, 5, 14, 7, 9)
    item = HistoryItem.create("Why us?", "Because.", now=now)
    assert item.id == int(now.timestamp() * 1000)
    assert item.timestamp == "03/05/2024, 02:07:09 PM"
    assert item.question == "Why us?"


def test_add_item_prepends_newest_first():
    history = add_item([_item(1)], _item(2))
    assert [it.id for it in history] == [2, 1]


def test_add_item_caps_at_limit_and_drops_oldest():
    history = [_item(n) for n in range(HISTORY_LIMIT, 0, -1)]
    assert len(history) == 50

    updated = add_item(history, _item(99))

    assert len(updated) == 50
    assert updated[0].id == 99
    assert all(it.id != 1 for it in updated)
    assert len(history) == 50


def test_load_missing_file_returns_empty(store):
    assert store.load() == []


def test_save_then_load_keeps_order(store):
    items = [_item(3), _item(2), _item(1)]
    store.save(items)
    assert store.load() == items


def test_save_skips_empty_history(store, tmp_path):
    store.save([])
    assert not (tmp_path / "history.json").exists()


def test_load_ignores_non_array_document(store):
    with open(store.path, "w", encoding="utf-8") as f:
        json.dump({"id": 1}, f)
    assert store.load() == []


def test_load_skips_entries_that_are_not_objects(store):
    with open(store.path, "w", encoding="utf-8") as f:
        json.dump([{"id": 1, "question": "q", "suggestion": "a", "timestamp": "t"}, "junk", 5], f)
    assert store.load() == [HistoryItem(id=1, question="q", suggestion="a", timestamp="t")]


def test_load_removes_corrupted_file(store, tmp_path):
    with open(store.path, "w", encoding="utf-8") as f:
        f.write("[{not json")

    assert store.load() == []
    assert not (tmp_path / "history.json").exists()


def test_clear_removes_file(store, tmp_path):
    store.save([_item(1)])
    store.clear()
    assert not (tmp_path / "history.json").exists()
    store.clear()


def test_save_failure_raises_history_error(tmp_path):
    store = HistoryStore(str(tmp_path / "missing-dir" / "history.json"))
    with pytest.raises(HistoryError):
        store.save([_item(1)])


def test_export_filename_uses_iso_date():
    assert export_filename(date(2025, 1, 9)) == "interview-history-2025-01-09.json"


def test_to_json_is_indented_array():
    text = to_json([_item(1)])
    assert text.startswith("[\n  {")
    assert json.loads(text) == [{"id": 1, "question": "q1", "suggestion": "a1", "timestamp": "t"}]


def test_read_failure_keeps_history_file(store, tmp_path, monkeypatch):
    store.save([_item(1)])

    def locked_open(*args, **kwargs):
        raise PermissionError("file is locked")

    monkeypatch.setattr(history, "open", locked_open, raising=False)
    assert store.load() == []
    monkeypatch.undo()

    assert (tmp_path / "history.json").exists()
    assert store.load() == [_item(1)]


def test_failed_replace_removes_temporary_file(store, tmp_path, monkeypatch):
    def failing_replace(src, dst):
        raise OSError("cross-device link")

    monkeypatch.setattr(history.os, "replace", failing_replace)
    with pytest.raises(HistoryError):
        store.save([_item(1)])

    assert not (tmp_path / "history.json.tmp").exists()
    assert not (tmp_path / "history.json").exists()


def test_load_caps_oversized_file(store):
    with open(store.path, "w", encoding="utf-8") as f:
        json.dump([_item(n).to_dict() for n in range(80)], f)

    items = store.load()

    assert len(items) == HISTORY_LIMIT
    assert items[0].id == 0
    assert items[-1].id == HISTORY_LIMIT - 1
