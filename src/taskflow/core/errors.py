# src/taskflow/core/errors.py

from __future__ import annotations


class TaskflowError(Exception):
    """Base class for errors reported by the task core."""


class ValidationError(TaskflowError, ValueError):
    """Invalid task data (blank title, unknown priority/category, bad date...)."""


class PersistenceError(TaskflowError):
    """
    Storage could not read or write the task collection.

    The repository never raises this from a mutating call: the in-memory
    collection stays authoritative and the error is kept on
    `TaskRepository.persistence_error` for the caller to report.
    """

    def __init__(self, operation: str, message: str | None = None) -> None:
        self.operation = operation
        super().__init__(message or f"Storage {operation} failed; changes are kept in memory only.")
