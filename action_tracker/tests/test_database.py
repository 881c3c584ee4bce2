"""Tests for the action store: defaults, filtering, ordering and patches."""

from unittest.mock import patch

import pytest
from sqlalchemy import inspect
from sqlmodel import Session, SQLModel

from action_tracker.database import ActionStore, StoreError
from action_tracker.models import Action, ActionCreate, ActionFilter, ActionPatch


def _create(store: ActionStore, **fields):
    fields.setdefault("origin", "audit")
    return store.create(ActionCreate(**fields))


def test_initialize_is_idempotent(store: ActionStore):
    _create(store, title="Kept")
    store.initialize()
    store.initialize()
    assert [a.title for a in store.list()] == ["Kept"]


def test_create_applies_defaults(store: ActionStore):
    action = _create(store, title="Missing signage")
    assert action.id is not None
    assert action.description == ""
    assert action.status == "todo"
    assert action.priority == "medium"
    assert action.due_date is None
    assert action.created_at.endswith("Z")


def test_create_treats_empty_optionals_as_absent(store: ActionStore):
    action = _create(store, title="Blank fields", status="", priority="", dueDate="")
    assert action.status == "todo"
    assert action.priority == "medium"
    assert action.due_date is None


def test_create_keeps_supplied_fields(store: ActionStore):
    action = _create(
        store,
        title="Fence repair",
        description="North gate",
        origin="incident",
        status="in_progress",
        priority="high",
        dueDate="2026-11-30",
    )
    listed = store.list()
    assert listed == [action]
    assert action.origin == "incident"
    assert action.status == "in_progress"
    assert action.priority == "high"
    assert action.due_date == "2026-11-30"


def test_ids_are_unique_and_not_reused(store: ActionStore):
    first = _create(store, title="One")
    second = _create(store, title="Two")
    assert store.delete(second.id) is True
    third = _create(store, title="Three")
    assert len({first.id, second.id, third.id}) == 3
    assert third.id > second.id


def test_list_orders_newest_first_with_id_tiebreak(store: ActionStore):
    with Session(store.engine) as session:
        session.add(Action(title="old", origin="audit", created_at="2026-01-01T00:00:00.000Z"))
        session.add(Action(title="tie-a", origin="audit", created_at="2026-02-01T00:00:00.000Z"))
        session.add(Action(title="tie-b", origin="audit", created_at="2026-02-01T00:00:00.000Z"))
        session.commit()
    assert [a.title for a in store.list()] == ["tie-b", "tie-a", "old"]


def test_list_filters_combine(store: ActionStore):
    _create(store, title="A", origin="audit", status="done")
    _create(store, title="B", origin="incident", status="done")
    _create(store, title="C", origin="audit", status="todo")

    done = store.list(ActionFilter(status="done"))
    assert sorted(a.title for a in done) == ["A", "B"]

    both = store.list(ActionFilter(status="done", origin="audit"))
    assert [a.title for a in both] == ["A"]

    assert store.list(ActionFilter(status="in_progress")) == []


def test_empty_filters_impose_nothing(store: ActionStore):
    _create(store, title="A")
    _create(store, title="B")
    assert len(store.list(ActionFilter(status="", origin="", search=""))) == 2


def test_search_is_case_insensitive_on_title_or_description(store: ActionStore):
    _create(store, title="Missing Signage")
    _create(store, title="Ladder check", description="replace SIGNAGE near stairs")
    _create(store, title="Unrelated")
    found = store.list(ActionFilter(search="signage"))
    assert sorted(a.title for a in found) == ["Ladder check", "Missing Signage"]


def test_search_treats_wildcards_literally(store: ActionStore):
    _create(store, title="100% inspected")
    _create(store, title="1000 inspected")
    found = store.list(ActionFilter(search="0%"))
    assert [a.title for a in found] == ["100% inspected"]


def test_update_applies_only_set_fields(store: ActionStore):
    action = _create(store, title="Original", description="keep me")
    updated = store.update(action.id, ActionPatch(status="done"))
    assert updated.status == "done"
    assert updated.title == "Original"
    assert updated.description == "keep me"
    assert updated.created_at == action.created_at


def test_update_can_clear_due_date(store: ActionStore):
    action = _create(store, title="Dated", dueDate="2026-12-01")
    updated = store.update(action.id, ActionPatch.model_validate({"dueDate": ""}))
    assert updated.due_date is None


def test_empty_update_returns_current_without_writing(store: ActionStore):
    action = _create(store, title="Untouched")
    with patch.object(Session, "commit") as commit:
        result = store.update(action.id, ActionPatch())
    assert result == action
    commit.assert_not_called()


def test_update_unknown_id_returns_none(store: ActionStore):
    assert store.update(999, ActionPatch(title="x")) is None
    assert store.update(999, ActionPatch()) is None


def test_delete_twice(store: ActionStore):
    action = _create(store, title="Temporary")
    assert store.delete(action.id) is True
    assert store.delete(action.id) is False
    assert store.get(action.id) is None


def test_patch_shape_ignores_unknown_and_non_string_fields():
    patch_ = ActionPatch.model_validate(
        {"id": 7, "createdAt": "2000-01-01", "title": "  Trimmed  ", "status": 3, "extra": "x"}
    )
    assert patch_.changes() == {"title": "Trimmed"}


def test_storage_failure_raises_store_error(store: ActionStore):
    SQLModel.metadata.drop_all(store.engine, tables=[Action.__table__])
    with pytest.raises(StoreError):
        store.list()


def test_initialize_creates_lookup_indexes(store: ActionStore):
    indexed = {
        column
        for index in inspect(store.engine).get_indexes("actions")
        for column in index["column_names"]
    }
    assert {"created_at", "status", "origin"} <= indexed


def test_file_store_uses_wal_and_foreign_keys(tmp_path):
    store = ActionStore(f"sqlite:///{tmp_path / 'actions.sqlite'}")
    store.initialize()
    try:
        with store.engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA journal_mode").scalar() == "wal"
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
    finally:
        store.close()


def test_input_schemas_only_accept_camel_case_due_date():
    assert ActionCreate.model_validate({"title": "T", "due_date": "2026-12-01"}).due_date is None
    assert ActionPatch.model_validate({"due_date": "2026-12-01"}).changes() == {}
    assert ActionPatch.model_validate({"dueDate": "2026-12-01"}).changes() == {
        "due_date": "2026-12-01"
    }
