# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The repository depends on a Protocol instead of a concrete store.
This keeps storage swappable (SQLite on disk, in-memory fakes in tests).
"""

from dataclasses import dataclass
from typing import Any, Protocol

TaskRecord = dict[str, Any]
# Plain wire record: {"id", "title", "priority", "category", "dueDate", ...}.


@dataclass(frozen=True, slots=True)
class StorageInfo:
    used_bytes: int
    used_kb: str  # formatted with 2 decimals, e.g. "1.25"
    task_count: int


class TaskStorage(Protocol):
    """
    Durable key-value storage for the serialized task list.

    None of these methods raise: failures are logged by the store and
    reported through the return value.
    """

    def load(self) -> list[TaskRecord]:
        """Stored records, or [] when nothing is stored or the data is unreadable."""
        ...

    def save(self, records: list[TaskRecord]) -> bool: ...
    def clear(self) -> bool: ...
    def is_available(self) -> bool: ...
    def storage_info(self) -> StorageInfo: ...
