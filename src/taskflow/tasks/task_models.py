# src/taskflow/tasks/task_models.py

from __future__ import annotations

import copy
import secrets
import string
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 9

# Marks a TaskUpdate field the caller did not supply (None is a real value for due_date).
UNSET: Any = object()


class _Choice(StrEnum):
    @classmethod
    def parse(cls, raw: Any, default: _Choice) -> Any:
        """Accept an enum member or a case-insensitive value; None/"" means `default`."""
        if raw is None:
            return default
        if isinstance(raw, cls):
            return raw
        value = str(raw).strip().lower()
        if not value:
            return default
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise ValidationError(f"Unknown {cls.__name__.lower()} {raw!r} (expected one of: {allowed})") from None


class Priority(_Choice):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Category(_Choice):
    PERSONAL = "personal"
    WORK = "work"
    STUDY = "study"
    HEALTH = "health"
    OTHER = "other"


class TaskFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"

    @classmethod
    def from_value(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.ALL


class SortKey(StrEnum):
    DATE_CREATED = "dateCreated"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    ALPHABETICAL = "alphabetical"

    @classmethod
    def from_value(cls, raw: str | None) -> SortKey:
        """Case-insensitive; snake_case spellings (due_date) are accepted too."""
        if not raw:
            return cls.DATE_CREATED
        wanted = str(raw).strip().replace("_", "").lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return cls.DATE_CREATED


def generate_task_id() -> str:
    """task_<epoch ms>_<9 random base36 chars>."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"task_{int(time.time() * 1000)}_{suffix}"


def utcnow() -> datetime:
    return datetime.now(UTC)


def coerce_date(raw: Any) -> date | None:
    """
    Normalize a due date to a calendar day.

    Accepts None/"", a date, a datetime (its date part) or an ISO string
    ("2024-01-05" or a full ISO timestamp).
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValidationError(f"Invalid date {raw!r} (expected YYYY-MM-DD)") from None


def coerce_timestamp(raw: Any) -> datetime | None:
    """Normalize a timestamp to an aware UTC datetime; naive values are taken as UTC."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        value = raw
    else:
        try:
            value = datetime.fromisoformat(str(raw).strip())
        except ValueError:
            raise ValidationError(f"Invalid timestamp {raw!r}") from None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    try:
        return value.astimezone(UTC)
    except (OverflowError, ValueError):
        raise ValidationError(f"Invalid timestamp {raw!r}") from None


def clean_title(raw: Any) -> str:
    title = "" if raw is None else str(raw).strip()
    if not title:
        raise ValidationError("Task title must not be empty")
    return title


@dataclass(frozen=True, slots=True)
class TaskUpdate:
    """
    Partial update of the user-editable fields.

    Fields left as UNSET are not touched; `due_date=None` clears the due date.
    """

    title: Any = UNSET
    priority: Any = UNSET
    category: Any = UNSET
    due_date: Any = UNSET

    _KEYS = {
        "title": "title",
        "priority": "priority",
        "category": "category",
        "due_date": "due_date",
        "dueDate": "due_date",
    }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TaskUpdate:
        """Build from a plain dict. Keys other than the editable fields are ignored."""
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = cls._KEYS.get(key)
            if name is not None:
                kwargs[name] = value
        return cls(**kwargs)

    def is_empty(self) -> bool:
        return all(getattr(self, name) is UNSET for name in ("title", "priority", "category", "due_date"))


@dataclass(slots=True)
class Task:
    title: str
    priority: Priority = Priority.MEDIUM
    category: Category = Category.PERSONAL
    due_date: date | None = None
    is_complete: bool = False
    id: str = field(default_factory=generate_task_id)
    created_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        self.title = clean_title(self.title)
        self.priority = Priority.parse(self.priority, Priority.MEDIUM)
        self.category = Category.parse(self.category, Category.PERSONAL)
        self.due_date = coerce_date(self.due_date)

        if self.id is None or not str(self.id).strip():
            self.id = generate_task_id()
        else:
            self.id = str(self.id).strip()

        self.created_at = coerce_timestamp(self.created_at) or utcnow()

        self.is_complete = bool(self.is_complete)
        if self.is_complete:
            self.completed_at = coerce_timestamp(self.completed_at) or utcnow()
        else:
            self.completed_at = None

    def toggle_complete(self, now: datetime | None = None) -> None:
        self.is_complete = not self.is_complete
        self.completed_at = (now or utcnow()) if self.is_complete else None

    def update(self, changes: TaskUpdate) -> None:
        """Apply a partial update; on ValidationError nothing is changed."""
        staged: dict[str, Any] = {}
        if changes.title is not UNSET:
            staged["title"] = clean_title(changes.title)
        if changes.priority is not UNSET:
            staged["priority"] = Priority.parse(changes.priority, Priority.MEDIUM)
        if changes.category is not UNSET:
            staged["category"] = Category.parse(changes.category, Category.PERSONAL)
        if changes.due_date is not UNSET:
            staged["due_date"] = coerce_date(changes.due_date)

        for name, value in staged.items():
            setattr(self, name, value)

    def is_overdue(self, today: date | None = None) -> bool:
        if self.due_date is None or self.is_complete:
            return False
        return self.due_date < (today or date.today())

    def snapshot(self) -> Task:
        """Independent copy (all fields are immutable values)."""
        return copy.copy(self)


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    overdue: int
    completion_rate: int
