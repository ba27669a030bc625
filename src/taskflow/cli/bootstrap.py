# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the storage into a TaskRepository and loads it,
- builds the AppState used by the console connector.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.task_models import SortKey, TaskFilter
from ..tasks.task_repository import TaskRepository

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    storage = SqliteKeyValueStore(
        settings.tasks_db_path,
        key=settings.storage_key,
        quota_bytes=settings.storage_quota_bytes,
    )

    # Probed once; without storage the app keeps working in memory.
    available = storage.is_available()
    if not available:
        logger.warning("Task storage at %s is not usable; tasks will not be saved.", settings.tasks_db_path)

    repository = TaskRepository(storage)
    repository.initialize()

    return AppState(
        settings=settings,
        storage=storage,
        repository=repository,
        storage_available=available,
        current_filter=TaskFilter.from_value(getattr(settings, "default_filter", None)),
        current_sort=SortKey.from_value(getattr(settings, "default_sort", None)),
    )
