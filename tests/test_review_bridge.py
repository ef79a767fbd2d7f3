# tests/test_review_bridge.py

from __future__ import annotations

import json

import pytest

from todo_sync.storage.persistence import PersistenceAdapter
from todo_sync.tasks.review_bridge import ReviewTaskBridge
from todo_sync.tasks.task_api import make_save_listener
from todo_sync.tasks.task_models import Task, base_name, compose_text
from todo_sync.tasks.task_store import TaskStore

from .fakes import CountingKV, FakeClock


def _wired(review: object | None, todos: list[Task] | None = None):
    kv = CountingKV()
    if review is not None:
        kv.data["review_tasks"] = review if isinstance(review, str) else json.dumps(review)
    persistence = PersistenceAdapter(kv)
    bridge = ReviewTaskBridge(persistence)
    store = TaskStore(todos or [], clock=FakeClock())
    store.subscribe(make_save_listener(persistence, todos_key="todos", bridge=bridge))
    return kv, bridge, store


def _review(kv: CountingKV) -> list[dict]:
    return json.loads(kv.data["review_tasks"])


@pytest.mark.parametrize(
    ("kwargs", "expected"),
    [
        ({}, "Buy milk"),
        ({"type_": "errand"}, "Buy milk [errand]"),
        ({"priority": "high"}, "Buy milk (high)"),
        ({"note": "2L"}, "Buy milk - 2L"),
        ({"type_": "errand", "priority": "high", "note": "2L"}, "Buy milk [errand] (high) - 2L"),
    ],
)
def test_compose_text_and_base_name(kwargs: dict, expected: str) -> None:
    text = compose_text("Buy milk", **kwargs)
    assert text == expected
    assert base_name(text) == "Buy milk"


def test_import_then_toggle_exports_completion() -> None:
    kv, bridge, store = _wired(
        [{"id": 1, "name": "Buy milk", "type": "errand", "completed": False}]
    )

    imported = bridge.import_new(store)

    assert len(imported) == 1
    task = store.snapshot()[0]
    assert task.text == "Buy milk [errand]"
    assert task.completed is False
    assert task.external_key == "id:1"
    # import persisted the native list
    assert json.loads(kv.data["todos"])["todos"][0]["text"] == "Buy milk [errand]"

    store.toggle(task.id)

    assert _review(kv) == [{"id": 1, "name": "Buy milk", "type": "errand", "completed": True}]


def test_import_is_idempotent_for_records_with_id() -> None:
    records = [
        {"id": 1, "name": "A"},
        {"id": "x-2", "name": "B", "priority": "low", "completed": True},
    ]
    kv, bridge, store = _wired(records)

    bridge.import_new(store)
    first = [(t.text, t.completed, t.external_key) for t in store]
    assert bridge.import_new(store) == []
    second = [(t.text, t.completed, t.external_key) for t in store]

    assert first == second == [("A", False, "id:1"), ("B (low)", True, "id:x-2")]


def test_records_without_id_are_not_reimported() -> None:
    kv, bridge, store = _wired([{"name": "Call mom", "note": "Sunday"}])

    bridge.import_new(store)
    bridge.import_new(store)

    assert [t.text for t in store] == ["Call mom - Sunday"]


def test_import_dedupes_within_one_collection() -> None:
    kv, bridge, store = _wired([{"id": 7, "name": "A"}, {"id": 7, "name": "A again"}])
    bridge.import_new(store)
    assert [t.text for t in store] == ["A"]


def test_import_preserves_source_order_after_native_tasks() -> None:
    native = [Task(id=100, text="mine", completed=False, created_at="")]
    kv, bridge, store = _wired([{"id": 1, "name": "first"}, {"id": 2, "name": "second"}], native)

    bridge.import_new(store)

    assert [t.text for t in store] == ["mine", "first", "second"]
    # imported tasks get fresh native ids, not the review ids
    assert 1 not in {t.id for t in store}
    assert len({t.id for t in store}) == 3


@pytest.mark.parametrize(
    "raw",
    [
        '"just a string"',
        "{not json",
        json.dumps({"name": "object, not array"}),
        json.dumps([{"id": 1}]),
        json.dumps(["bare string record"]),
    ],
)
def test_malformed_review_data_is_a_noop(raw: str) -> None:
    native = [Task(id=1, text="mine", completed=True, created_at="t")]
    kv, bridge, store = _wired(raw, native)
    before = store.snapshot()

    assert bridge.import_new(store) == []
    assert bridge.export_completion(store) == 0

    assert store.snapshot() == before
    assert kv.data["review_tasks"] == raw
    assert "todos" not in kv.data


@pytest.mark.parametrize("review", [None, []])
def test_absent_or_empty_review_data_is_silent(review) -> None:
    kv, bridge, store = _wired(review)
    assert bridge.import_new(store) == []
    assert bridge.export_completion(store) == 0
    assert kv.writes.get("review_tasks", 0) == 0


def test_export_is_a_pure_projection_and_keeps_unknown_fields() -> None:
    records = [
        {"id": 1, "name": "A", "assignee": "kim", "completed": False},
        {"id": 2, "name": "Untracked", "completed": True},
    ]
    kv, bridge, store = _wired(records)
    bridge.import_new(store)
    store.toggle(store.snapshot()[0].id)

    bridge.export_completion(store)
    once = kv.data["review_tasks"]
    bridge.export_completion(store)
    twice = kv.data["review_tasks"]

    assert once == twice
    out = json.loads(twice)
    assert out[0] == {"id": 1, "name": "A", "assignee": "kim", "completed": True}


def test_export_unmatched_records_pass_through() -> None:
    records = [{"id": 9, "name": "Elsewhere", "completed": True}]
    kv, bridge, store = _wired(records)
    bridge.import_new(store)
    linked = store.snapshot()[0]
    store.delete(linked.id)

    assert _review(kv) == records


def test_export_matches_unlinked_tasks_by_base_name() -> None:
    native = [Task(id=10, text="Water plants [home] (low)", completed=True, created_at="")]
    kv, bridge, store = _wired([{"name": "Water plants", "type": "home"}], native)

    assert bridge.export_completion(store) == 1
    assert _review(kv)[0]["completed"] is True


def test_export_duplicate_base_names_later_task_wins() -> None:
    native = [
        Task(id=1, text="Shared [a]", completed=True, created_at=""),
        Task(id=2, text="Shared (b)", completed=False, created_at=""),
    ]
    kv, bridge, store = _wired([{"name": "Shared"}], native)

    bridge.export_completion(store)

    assert _review(kv)[0]["completed"] is False


def test_foreign_key_match_wins_over_base_name() -> None:
    native = [
        Task(id=1, text="Report", completed=False, created_at="", external_key="id:r1"),
        Task(id=2, text="Report", completed=True, created_at=""),
    ]
    kv, bridge, store = _wired([{"id": "r1", "name": "Report"}], native)

    bridge.export_completion(store)

    assert _review(kv)[0]["completed"] is False


def test_import_links_unlinked_task_with_matching_id() -> None:
    native = [Task(id=5, text="Old import (high)", completed=True, created_at="")]
    kv, bridge, store = _wired([{"id": "5", "name": "Old import", "priority": "high"}], native)

    assert bridge.import_new(store) == []

    assert [(t.id, t.external_key) for t in store] == [(5, "id:5")]
    assert _review(kv)[0]["completed"] is True


def test_import_does_not_link_already_linked_task() -> None:
    native = [Task(id=5, text="Other", completed=False, created_at="", external_key="id:x")]
    kv, bridge, store = _wired([{"id": 5, "name": "Fresh"}], native)

    imported = bridge.import_new(store)

    assert [t.text for t in imported] == ["Fresh"]
    assert store.get(5).external_key == "id:x"


def test_string_completed_is_not_true() -> None:
    kv, bridge, store = _wired([{"id": 1, "name": "A", "completed": "false"}])
    bridge.import_new(store)
    assert store.snapshot()[0].completed is False
