# src/taskflow/tasks/task_repository.py

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from ..core.errors import PersistenceError, ValidationError
from ..core.ports import TaskStorage
from .task_codec import tasks_from_records, tasks_to_records
from .task_models import SortKey, Task, TaskFilter, TaskStats, TaskUpdate, generate_task_id

logger = logging.getLogger(__name__)

_PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


def _title_key(task: Task) -> tuple[str, str]:
    """
    Collation key approximating a locale-aware compare.

    Primary: title without accents, case-folded. Ties: accents, then case
    (lowercase first), by comparing the case-swapped original.
    """
    decomposed = unicodedata.normalize("NFKD", task.title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), unicodedata.normalize("NFC", task.title).swapcase()


def search_tasks(tasks: Iterable[Task], query: str | None) -> list[Task]:
    """Case-insensitive title substring match; a blank query keeps everything."""
    term = (query or "").strip().casefold()
    if not term:
        return list(tasks)
    return [t for t in tasks if term in t.title.casefold()]


def sort_tasks(tasks: Iterable[Task], key: SortKey | str | None) -> list[Task]:
    """
    Return a new list ordered by `key`. Every ordering is stable.

    - dateCreated: newest first
    - dueDate: earliest first, tasks without a due date last
    - priority: high, medium, low
    - alphabetical: by title, case-insensitive
    """
    items = list(tasks)
    sort_key = key if isinstance(key, SortKey) else SortKey.from_value(key)

    if sort_key is SortKey.DUE_DATE:
        return sorted(items, key=lambda t: (t.due_date is None, t.due_date or date.min))
    if sort_key is SortKey.PRIORITY:
        return sorted(items, key=lambda t: _PRIORITY_RANK[t.priority.value])
    if sort_key is SortKey.ALPHABETICAL:
        return sorted(items, key=_title_key)
    # reverse=True keeps equal elements in their original order.
    return sorted(items, key=lambda t: t.created_at, reverse=True)


class TaskRepository:
    """
    In-memory task collection backed by an injected storage port.

    Ordering: new tasks go to the front (newest first).

    Persistence:
    - every successful mutation saves the full collection exactly once
    - a failed save keeps the in-memory change; the failure is exposed as
      `persistence_error` until the next successful write

    Everything handed out (lookups, query results) is a copy, so callers
    cannot change the collection except through these methods.
    """

    def __init__(self, storage: TaskStorage) -> None:
        self._storage = storage
        self._tasks: list[Task] = []
        self._initialized = False
        self.persistence_error: PersistenceError | None = None

    # ---- lifecycle ----

    def initialize(self) -> None:
        """Load the collection from storage, replacing whatever is in memory."""
        records = self._storage.load()
        self._tasks = tasks_from_records(records)
        self._initialized = True
        logger.info("Loaded %d tasks from storage (%d stored records)", len(self._tasks), len(records))

    @property
    def is_durable(self) -> bool:
        """False when the last write to storage failed."""
        return self.persistence_error is None

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- low-level helpers ----

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("TaskRepository.initialize() must be called first")

    def _persist(self) -> bool:
        ok = self._storage.save(tasks_to_records(self._tasks))
        return self._record_write("save", ok)

    def _record_write(self, operation: str, ok: bool) -> bool:
        if ok:
            self.persistence_error = None
            return True
        self.persistence_error = PersistenceError(operation)
        logger.warning("Storage %s failed; %d tasks kept in memory only", operation, len(self._tasks))
        return False

    def _find(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    # ---- mutations ----

    def add(
        self,
        title: str,
        *,
        priority: Any = None,
        category: Any = None,
        due_date: Any = None,
        task_id: str | None = None,
        is_complete: bool = False,
        created_at: Any = None,
        completed_at: Any = None,
    ) -> Task:
        """
        Create a task and put it at the front of the collection.

        Raises ValidationError (collection unchanged, nothing saved) on invalid
        input or when `task_id` is already used by a live task.
        """
        self._require_initialized()
        if task_id is not None and self._find(str(task_id).strip()) is not None:
            raise ValidationError(f"Task id {task_id!r} already exists")

        task = Task(
            title=title,
            priority=priority,
            category=category,
            due_date=due_date,
            is_complete=is_complete,
            id=task_id,
            created_at=created_at,
            completed_at=completed_at,
        )
        while task_id is None and self._find(task.id) is not None:
            task.id = generate_task_id()

        self._tasks.insert(0, task)
        self._persist()
        logger.debug("Task added id=%s priority=%s due=%s", task.id, task.priority, task.due_date)
        return task.snapshot()

    def update(self, task_id: str, changes: TaskUpdate | Mapping[str, Any]) -> Task | None:
        """
        Apply a partial update. Returns None if no task has this id.

        Raises ValidationError (task and collection unchanged) on invalid values.
        """
        self._require_initialized()
        task = self._find(task_id)
        if task is None:
            logger.debug("update: task id=%s not found", task_id)
            return None

        if not isinstance(changes, TaskUpdate):
            changes = TaskUpdate.from_mapping(changes)
        task.update(changes)
        self._persist()
        return task.snapshot()

    def toggle_complete(self, task_id: str) -> Task | None:
        self._require_initialized()
        task = self._find(task_id)
        if task is None:
            logger.debug("toggle_complete: task id=%s not found", task_id)
            return None

        task.toggle_complete()
        self._persist()
        logger.debug("Task id=%s complete=%s", task.id, task.is_complete)
        return task.snapshot()

    def delete(self, task_id: str) -> bool:
        self._require_initialized()
        remaining = [t for t in self._tasks if t.id != task_id]
        if len(remaining) == len(self._tasks):
            logger.debug("delete: task id=%s not found", task_id)
            return False

        self._tasks = remaining
        self._persist()
        return True

    def clear_completed(self) -> int:
        self._require_initialized()
        remaining = [t for t in self._tasks if not t.is_complete]
        removed = len(self._tasks) - len(remaining)
        if removed > 0:
            self._tasks = remaining
            self._persist()
        return removed

    def clear_all(self) -> int:
        """Drop every task and wipe the stored key (even if nothing was in memory)."""
        self._require_initialized()
        removed = len(self._tasks)
        self._tasks = []
        self._record_write("clear", self._storage.clear())
        logger.info("Cleared all tasks (%d removed)", removed)
        return removed

    # ---- queries ----

    def get_by_id(self, task_id: str) -> Task | None:
        self._require_initialized()
        task = self._find(task_id)
        return task.snapshot() if task is not None else None

    def all(self) -> list[Task]:
        self._require_initialized()
        return [t.snapshot() for t in self._tasks]

    def filter(self, criterion: TaskFilter | str | None = TaskFilter.ALL, *, today: date | None = None) -> list[Task]:
        self._require_initialized()
        which = criterion if isinstance(criterion, TaskFilter) else TaskFilter.from_value(criterion)

        if which is TaskFilter.PENDING:
            selected = [t for t in self._tasks if not t.is_complete]
        elif which is TaskFilter.COMPLETED:
            selected = [t for t in self._tasks if t.is_complete]
        elif which is TaskFilter.OVERDUE:
            day = today or date.today()
            selected = [t for t in self._tasks if t.is_overdue(day)]
        else:
            selected = self._tasks
        return [t.snapshot() for t in selected]

    def search(self, query: str | None, tasks: Iterable[Task] | None = None) -> list[Task]:
        """
        Title search over the whole collection, or over `tasks` when given
        (used to narrow an already filtered list).
        """
        if tasks is None:
            return search_tasks(self.all(), query)
        return search_tasks(tasks, query)

    @staticmethod
    def sort(tasks: Iterable[Task], key: SortKey | str | None = SortKey.DATE_CREATED) -> list[Task]:
        return sort_tasks(tasks, key)

    def view(
        self,
        criterion: TaskFilter | str | None = TaskFilter.ALL,
        query: str | None = None,
        key: SortKey | str | None = SortKey.DATE_CREATED,
        *,
        today: date | None = None,
    ) -> list[Task]:
        """Filter, then narrow by title search, then sort."""
        selected = self.filter(criterion, today=today)
        return sort_tasks(search_tasks(selected, query), key)

    def stats(self, *, today: date | None = None) -> TaskStats:
        self._require_initialized()
        day = today or date.today()
        total = len(self._tasks)
        completed = sum(1 for t in self._tasks if t.is_complete)
        overdue = sum(1 for t in self._tasks if t.is_overdue(day))
        # Integer round-half-up of completed / total * 100.
        rate = (completed * 200 + total) // (2 * total) if total > 0 else 0
        return TaskStats(
            total=total,
            completed=completed,
            pending=total - completed,
            overdue=overdue,
            completion_rate=rate,
        )
