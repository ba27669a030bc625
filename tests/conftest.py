# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.core.state import AppState
from taskflow.tasks.task_repository import TaskRepository

from .fakes import FakeStorage


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskflow-test",
        log_level="DEBUG",
        log_to_file=False,
        data_dir=tmp_path / "data",
        tasks_db_path=tmp_path / "data" / "tasks.sqlite3",
        storage_key="taskflow_tasks",
        storage_quota_bytes=0,
        default_filter="all",
        default_sort="dateCreated",
    )


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def repo(storage: FakeStorage) -> TaskRepository:
    repository = TaskRepository(storage)
    repository.initialize()
    return repository


@pytest.fixture()
def state(settings: SimpleNamespace, storage: FakeStorage, repo: TaskRepository) -> AppState:
    """AppState wired with the fake storage (SQLite is covered in test_kv_store.py)."""
    return AppState(settings=settings, storage=storage, repository=repo)
