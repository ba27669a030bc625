# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskflow.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TASKFLOW_APP_NAME",
        "TASKFLOW_DATA_DIR",
        "TASKFLOW_TASKS_DB_PATH",
        "TASKFLOW_STORAGE_QUOTA_BYTES",
        "TASKFLOW_DEFAULT_SORT",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()

    assert s.app_name == "taskflow"
    assert s.data_dir == Path(".local/taskflow")
    assert s.tasks_db_path == Path(".local/taskflow/tasks.sqlite3")
    assert s.storage_quota_bytes == 5 * 1024 * 1024
    assert s.default_sort == "dateCreated"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKFLOW_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TASKFLOW_TASKS_DB_PATH", raising=False)
    monkeypatch.setenv("TASKFLOW_STORAGE_QUOTA_BYTES", "not-a-number")
    monkeypatch.setenv("TASKFLOW_LOG_TO_FILE", "off")
    monkeypatch.setenv("TASKFLOW_STORAGE_KEY", "  ")

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.storage_quota_bytes == 5 * 1024 * 1024
    assert s.log_to_file is False
    assert s.storage_key == "taskflow_tasks"
