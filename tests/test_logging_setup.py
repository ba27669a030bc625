# tests/test_logging_setup.py

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.logging_setup import (
    _ConsoleNoiseFilter,
    log_file_name,
    resolve_level,
    setup_logging,
    setup_logging_from_settings,
)


@pytest.fixture()
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_app_logs_and_hides_library_noise() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("taskflow.tasks.task_repository", logging.DEBUG))
    assert not f.filter(_record("sqlite_helper", logging.WARNING))
    assert f.filter(_record("sqlite_helper", logging.ERROR))
    assert not f.filter(_record("py.warnings", logging.WARNING))


def test_setup_logging_writes_file(tmp_path: Path, restore_root_logging: None) -> None:
    setup_logging(log_dir=tmp_path, console_level=logging.CRITICAL)

    logging.getLogger("taskflow.test").debug("hello %s", "file")
    for h in logging.getLogger().handlers:
        h.flush()

    text = (tmp_path / "taskflow.log").read_text("utf-8")
    assert "DEBUG taskflow.test: hello file" in text


def test_setup_logging_without_file(tmp_path: Path, restore_root_logging: None) -> None:
    setup_logging(log_dir=None)
    assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)


@pytest.mark.parametrize(
    ("name", "expected"),
    [("info", logging.INFO), (" Debug ", logging.DEBUG), ("loud", logging.WARNING), (None, logging.WARNING)],
)
def test_resolve_level(name, expected) -> None:
    assert resolve_level(name) == expected


def test_log_file_is_named_after_the_app() -> None:
    assert log_file_name("taskflow") == "taskflow.log"
    assert log_file_name("my tasks/dev") == "my_tasks_dev.log"
    assert log_file_name("  ") == "taskflow.log"


def test_setup_from_settings(tmp_path: Path, restore_root_logging: None) -> None:
    settings = SimpleNamespace(
        app_name="taskflow-dev", log_level="error", log_to_file=True, data_dir=tmp_path
    )

    path = setup_logging_from_settings(settings)

    assert path == tmp_path / "taskflow-dev.log"
    console = next(h for h in logging.getLogger().handlers if not isinstance(h, logging.FileHandler))
    assert console.level == logging.ERROR

    logging.getLogger("taskflow.test").info("started")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "INFO taskflow.test: started" in path.read_text("utf-8")


def test_setup_from_settings_without_file(tmp_path: Path, restore_root_logging: None) -> None:
    settings = SimpleNamespace(
        app_name="taskflow", log_level="warning", log_to_file=False, data_dir=tmp_path
    )
    assert setup_logging_from_settings(settings) is None
    assert not list(tmp_path.iterdir())
