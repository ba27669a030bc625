# src/taskflow/tasks/task_codec.py

"""
Serialization boundary between Task and its plain storage record.

Record shape (every key always present, nullable values as None):
    {id, title, priority, category, dueDate, isComplete, createdAt, completedAt}

dueDate is "YYYY-MM-DD"; timestamps are ISO-8601 UTC with milliseconds and a
"Z" suffix, e.g. "2024-01-05T09:30:00.000Z".
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from ..core.errors import ValidationError
from ..core.ports import TaskRecord
from .task_models import Task

logger = logging.getLogger(__name__)

RECORD_FIELDS = (
    "id",
    "title",
    "priority",
    "category",
    "dueDate",
    "isComplete",
    "createdAt",
    "completedAt",
)


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def task_to_record(task: Task) -> TaskRecord:
    return {
        "id": task.id,
        "title": task.title,
        "priority": task.priority.value,
        "category": task.category.value,
        "dueDate": task.due_date.isoformat() if task.due_date else None,
        "isComplete": task.is_complete,
        "createdAt": format_timestamp(task.created_at),
        "completedAt": format_timestamp(task.completed_at),
    }


def task_from_record(record: Mapping[str, Any]) -> Task:
    """
    Build a Task from a stored record.

    Raises ValidationError if the record is not a mapping or holds invalid data.
    """
    if not isinstance(record, Mapping):
        raise ValidationError(f"Task record must be an object, got {type(record).__name__}")

    is_complete = record.get("isComplete")
    if is_complete is None:
        is_complete = False
    if not isinstance(is_complete, bool):
        raise ValidationError(f"isComplete must be a boolean, got {is_complete!r}")

    return Task(
        id=record.get("id"),
        title=record.get("title"),
        priority=record.get("priority"),
        category=record.get("category"),
        due_date=record.get("dueDate"),
        is_complete=is_complete,
        created_at=record.get("createdAt"),
        completed_at=record.get("completedAt"),
    )


def tasks_to_records(tasks: Iterable[Task]) -> list[TaskRecord]:
    return [task_to_record(t) for t in tasks]


def tasks_from_records(records: Iterable[Any]) -> list[Task]:
    """Decode stored records, dropping invalid entries and repeated ids (first one wins)."""
    out: list[Task] = []
    seen: set[str] = set()
    for index, raw in enumerate(records):
        try:
            task = task_from_record(raw)
        except ValidationError as e:
            logger.warning("Dropping invalid stored task #%d: %s", index, e)
            continue
        if task.id in seen:
            logger.warning("Dropping stored task #%d: duplicate id %s", index, task.id)
            continue
        seen.add(task.id)
        out.append(task)
    return out
