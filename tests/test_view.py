"""
Tests for the local view store.
"""
import pytest

from taskboard.schema import Task, TaskStatus
from taskboard.view import LocalViewStore


def _snapshot():
    return [
        Task("t2", "Second", TaskStatus.INPROCESS, "2026-01-02T00:00:00.000000Z"),
        Task("t1", "First", TaskStatus.TODO, "2026-01-01T00:00:00.000000Z"),
    ]


def test_empty_view():
    view = LocalViewStore()
    assert len(view) == 0
    assert dict(view.get()) == {}
    assert view.version == 0


def test_apply_snapshot_keeps_delivery_order():
    view = LocalViewStore()
    assert view.apply_snapshot(_snapshot())
    assert list(view.get()) == ["t2", "t1"]
    assert view.find("t1").title == "First"
    assert "t2" in view


def test_same_snapshot_twice_is_noop():
    view = LocalViewStore()
    view.apply_snapshot(_snapshot())
    before = view.get()
    assert not view.apply_snapshot(_snapshot())
    assert view.get() is before
    assert view.version == 1


def test_reorder_counts_as_change():
    view = LocalViewStore()
    view.apply_snapshot(_snapshot())
    assert view.apply_snapshot(list(reversed(_snapshot())))
    assert list(view.get()) == ["t1", "t2"]


def test_snapshot_replaces_content():
    view = LocalViewStore()
    view.apply_snapshot(_snapshot())
    view.apply_snapshot([Task("t3", "Third")])
    assert list(view.get()) == ["t3"]


def test_mapping_is_read_only():
    view = LocalViewStore()
    view.apply_snapshot(_snapshot())
    with pytest.raises(TypeError):
        view.get()["t9"] = Task("t9", "Injected")


def test_duplicate_ids_leave_previous_snapshot():
    view = LocalViewStore()
    view.apply_snapshot(_snapshot())
    before = view.get()
    with pytest.raises(ValueError):
        view.apply_snapshot([Task("t5", "A"), Task("t5", "B")])
    assert view.get() is before
    assert view.version == 1


def test_non_task_item_leaves_previous_snapshot():
    view = LocalViewStore()
    view.apply_snapshot(_snapshot())
    with pytest.raises(TypeError):
        view.apply_snapshot([Task("t5", "A"), {"id": "t6"}])
    assert list(view.get()) == ["t2", "t1"]
