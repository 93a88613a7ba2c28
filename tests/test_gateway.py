"""
Tests for the mutation gateway.

The store is a MagicMock so each test can assert exactly which command
(if any) was issued.
"""
from unittest.mock import MagicMock

import pytest

from taskboard.errors import NotFoundError, TransportError, ValidationError
from taskboard.gateway import MutationGateway
from taskboard.intents import Create, Delete, Move, Rename
from taskboard.schema import Task, TaskStatus
from taskboard.view import LocalViewStore


@pytest.fixture
def view():
    view = LocalViewStore()
    view.apply_snapshot([Task("t1", "Write spec", TaskStatus.TODO, "2026-01-01")])
    return view


@pytest.fixture
def store():
    store = MagicMock()
    store.insert.return_value = "task-new"
    return store


@pytest.fixture
def gateway(store, view):
    return MutationGateway(store, view)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# create
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_create_issues_insert_in_todo(gateway, store):
    assert gateway.create("  Ship it  ") == "task-new"
    store.insert.assert_called_once_with({"title": "Ship it", "status": "todo"})


@pytest.mark.parametrize("title", ["", "   ", "\t\n"])
def test_create_with_blank_title_issues_nothing(gateway, store, title):
    with pytest.raises(ValidationError):
        gateway.create(title)
    store.insert.assert_not_called()
    assert gateway.commands_issued == 0


def test_create_does_not_touch_view(gateway, view):
    before = view.get()
    gateway.create("New task")
    assert view.get() is before


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# rename
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_rename_writes_title_only(gateway, store):
    assert gateway.rename("t1", " Write full spec ")
    store.update_fields.assert_called_once_with("t1", {"title": "Write full spec"})


def test_rename_to_same_title_is_noop(gateway, store):
    assert gateway.rename("t1", "  Write spec ") is False
    store.update_fields.assert_not_called()


def test_rename_to_blank_raises(gateway, store, view):
    with pytest.raises(ValidationError):
        gateway.rename("t1", "  ")
    store.update_fields.assert_not_called()
    assert view.find("t1").title == "Write spec"


def test_rename_unknown_locally_still_asks_store(gateway, store):
    store.update_fields.side_effect = NotFoundError("t9")
    with pytest.raises(NotFoundError):
        gateway.rename("t9", "Anything")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# move
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@pytest.mark.parametrize("status", list(TaskStatus))
def test_move_writes_status_only(gateway, store, status):
    assert gateway.move("t1", status) is status
    store.update_fields.assert_called_once_with("t1", {"status": status.value})


def test_move_does_not_check_transition_legality(gateway, store):
    """Backward moves are the caller's call"""
    gateway.move("t1", "todo")
    store.update_fields.assert_called_once_with("t1", {"status": "todo"})


def test_move_rejects_unknown_status(gateway, store):
    with pytest.raises(ValidationError):
        gateway.move("t1", "archived")
    store.update_fields.assert_not_called()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# delete / failures
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_delete_issues_delete(gateway, store):
    gateway.delete("t1")
    store.delete.assert_called_once_with("t1")


def test_delete_not_found_is_surfaced(gateway, store, view):
    store.delete.side_effect = NotFoundError("t1")
    with pytest.raises(NotFoundError):
        gateway.delete("t1")
    assert "t1" in view  # Only the feed removes entries
    assert store.delete.call_count == 1


def test_transport_error_is_not_retried(gateway, store):
    store.update_fields.side_effect = TransportError("disk I/O error")
    with pytest.raises(TransportError):
        gateway.move("t1", TaskStatus.COMPLETE)
    assert store.update_fields.call_count == 1


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# handle(intent)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_handle_dispatches_every_intent(gateway, store):
    assert gateway.handle(Create("New")) == "task-new"
    assert gateway.handle(Rename("t1", "Renamed")) is True
    assert gateway.handle(Move("t1", "inprocess")) is TaskStatus.INPROCESS
    assert gateway.handle(Delete("t1")) is None
    assert gateway.commands_issued == 4


def test_handle_rejects_unknown_intent(gateway):
    with pytest.raises(TypeError):
        gateway.handle(("move", "t1", "complete"))
