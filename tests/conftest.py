"""Shared test fixtures for the task board tests."""

import sys
from pathlib import Path

import pytest

# Ensure the taskboard package is importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskboard.board import TaskBoard
from taskboard.store import SQLiteTaskStore


@pytest.fixture
def store(tmp_path):
    return SQLiteTaskStore(str(tmp_path / "tasks.db"))


@pytest.fixture
def board(store):
    board = TaskBoard(store).open()
    yield board
    board.close()
