# tests/test_console.py

from __future__ import annotations

from taskflow.cli.bootstrap import create_initial_state
from taskflow.connectors.console_connector import handle_line, run_console_loop
from taskflow.tasks.task_models import SortKey, TaskFilter


def test_plain_text_adds_a_task(state) -> None:
    assert handle_line(state, "  Water plants ") == "Added: Water plants"
    assert handle_line(state, "   ") is None
    assert [t.title for t in state.repository.all()] == ["Water plants"]


def test_console_loop_runs_commands_until_exit(state) -> None:
    inputs = iter(["Buy milk", "/stats", "/exit", "never read"])
    out: list[str] = []

    run_console_loop(state, read=lambda _prompt: next(inputs), write=out.append)

    assert "Added: Buy milk" in out
    assert any("Total: 1" in line for line in out)
    assert next(inputs) == "never read"


def test_console_loop_stops_on_eof(state) -> None:
    def read(_prompt: str) -> str:
        raise EOFError

    out: list[str] = []
    run_console_loop(state, read=read, write=out.append)
    assert out  # greeting + initial listing


def test_bootstrap_wires_sqlite_storage(settings) -> None:
    settings.default_filter = "pending"
    settings.default_sort = "priority"

    state = create_initial_state(settings=settings)

    assert settings.tasks_db_path.exists()
    assert state.storage_available is True
    assert state.current_filter is TaskFilter.PENDING
    assert state.current_sort is SortKey.PRIORITY

    state.repository.add("persisted")
    reloaded = create_initial_state(settings=settings)
    assert [t.title for t in reloaded.repository.all()] == ["persisted"]
