# src/taskflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..tasks.task_models import SortKey, TaskFilter
from ..tasks.task_repository import TaskRepository
from .ports import TaskStorage


@dataclass
class AppState:
    # Settings object (config.Settings or a test stand-in).
    settings: object

    storage: TaskStorage
    repository: TaskRepository
    storage_available: bool = True

    # Current view, as chosen with /filter, /sort, /search.
    current_filter: TaskFilter = TaskFilter.ALL
    current_sort: SortKey = SortKey.DATE_CREATED
    current_search: str = ""

    # Ids in the order of the last listing; "/done 2" refers to the second one.
    last_listing: list[str] = field(default_factory=list)
