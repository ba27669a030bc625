# tests/test_task_codec.py

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from taskflow.core.errors import ValidationError
from taskflow.tasks.task_codec import (
    RECORD_FIELDS,
    format_timestamp,
    task_from_record,
    task_to_record,
    tasks_from_records,
)
from taskflow.tasks.task_models import Category, Priority, Task


def test_record_has_every_field_with_nulls() -> None:
    task = Task(title="Plain", id="task_1", created_at=datetime(2024, 1, 5, 9, 30, 0, 123456, tzinfo=UTC))

    record = task_to_record(task)

    assert tuple(record) == RECORD_FIELDS
    assert record == {
        "id": "task_1",
        "title": "Plain",
        "priority": "medium",
        "category": "personal",
        "dueDate": None,
        "isComplete": False,
        "createdAt": "2024-01-05T09:30:00.123Z",
        "completedAt": None,
    }


def test_completed_task_record() -> None:
    done_at = datetime(2024, 2, 1, 10, 0, tzinfo=UTC)
    task = Task(
        title="Done",
        priority="high",
        category="health",
        due_date="2024-01-31",
        is_complete=True,
        completed_at=done_at,
    )

    record = task_to_record(task)

    assert record["dueDate"] == "2024-01-31"
    assert record["isComplete"] is True
    assert record["completedAt"] == "2024-02-01T10:00:00.000Z"


def test_decodes_browser_style_record() -> None:
    task = task_from_record(
        {
            "id": "task_1704067200000_k3j9x0abc",
            "title": " Buy milk ",
            "priority": "high",
            "category": "work",
            "dueDate": "2024-01-01",
            "isComplete": False,
            "createdAt": "2023-12-31T22:15:03.512Z",
            "completedAt": None,
        }
    )

    assert task.id == "task_1704067200000_k3j9x0abc"
    assert task.title == "Buy milk"
    assert task.priority is Priority.HIGH
    assert task.category is Category.WORK
    assert task.due_date == date(2024, 1, 1)
    assert task.created_at == datetime(2023, 12, 31, 22, 15, 3, 512000, tzinfo=UTC)


def test_missing_optional_fields_take_defaults() -> None:
    task = task_from_record({"title": "Bare"})
    assert task.priority is Priority.MEDIUM
    assert task.category is Category.PERSONAL
    assert task.id.startswith("task_")


def test_naive_timestamp_is_read_as_utc() -> None:
    task = task_from_record({"title": "x", "createdAt": "2024-01-05T09:30:00"})
    assert task.created_at == datetime(2024, 1, 5, 9, 30, tzinfo=UTC)


@pytest.mark.parametrize(
    "record",
    [
        {"title": ""},
        {"title": "x", "isComplete": "yes"},
        {"title": "x", "createdAt": "yesterday"},
        {"title": "x", "dueDate": "31/01/2024"},
        ["title", "x"],
        None,
    ],
)
def test_invalid_records_raise(record) -> None:
    with pytest.raises(ValidationError):
        task_from_record(record)


def test_tasks_from_records_keeps_first_of_duplicate_ids() -> None:
    tasks = tasks_from_records(
        [
            {"id": "a", "title": "first"},
            {"id": "a", "title": "second"},
            {"id": "b", "title": ""},
            {"id": "c", "title": "third"},
        ]
    )
    assert [(t.id, t.title) for t in tasks] == [("a", "first"), ("c", "third")]


def test_format_timestamp_converts_to_utc() -> None:
    assert format_timestamp(None) is None
    value = datetime.fromisoformat("2024-01-05T12:00:00+02:00")
    assert format_timestamp(value) == "2024-01-05T10:00:00.000Z"


def test_timestamp_out_of_range_after_utc_shift_is_invalid() -> None:
    with pytest.raises(ValidationError):
        task_from_record({"title": "x", "createdAt": "0001-01-01T00:00:00+05:00"})


def test_early_year_timestamp_is_zero_padded_and_reloads() -> None:
    task = task_from_record({"id": "old", "title": "x", "createdAt": "0999-06-01T00:00:00.000Z"})

    record = task_to_record(task)
    assert record["createdAt"] == "0999-06-01T00:00:00.000Z"
    assert task_from_record(record) == task


def test_null_is_complete_reads_as_pending() -> None:
    task = task_from_record({"title": "x", "isComplete": None, "completedAt": None})
    assert task.is_complete is False
    assert task.completed_at is None
