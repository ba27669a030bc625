# src/taskflow/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from ..core.errors import ValidationError
from ..core.state import AppState
from ..tasks.task_models import SortKey, Task, TaskFilter, TaskUpdate

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

PRIORITY_EMOJI = {"low": "\U0001f7e2", "medium": "\U0001f7e1", "high": "\U0001f534"}
CATEGORY_EMOJI = {
    "personal": "\U0001f464",
    "work": "\U0001f4bc",
    "study": "\U0001f4da",
    "health": "\U0001f3c3",
    "other": "\U0001f4cc",
}
_EDIT_FIELDS = ("title", "priority", "category", "due")


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except ValidationError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def format_due_date(value: date) -> str:
    """Jan 5, 2024"""
    return f"{value:%b} {value.day}, {value.year}"


def format_task_line(number: int, task: Task, today: date | None = None) -> str:
    box = "[x]" if task.is_complete else "[ ]"
    meta = [
        f"{PRIORITY_EMOJI.get(task.priority.value, '')} {task.priority.value.capitalize()}",
        f"{CATEGORY_EMOJI.get(task.category.value, '')} {task.category.value.capitalize()}",
    ]
    if task.due_date is not None:
        due = f"\U0001f4c5 {format_due_date(task.due_date)}"
        if task.is_overdue(today):
            due += " (Overdue)"
        meta.append(due)
    return f"{number:>3}. {box} {task.title}  " + " · ".join(meta)


def durability_note(state: AppState) -> str:
    if state.repository.persistence_error is None:
        return ""
    return "\nWarning: changes could not be saved; they are kept in memory only."


def _resolve_ref(state: AppState, ref: str) -> str | None:
    """A number from the last listing, or a task id."""
    if ref.isdigit():
        n = int(ref)
        if 1 <= n <= len(state.last_listing):
            return state.last_listing[n - 1]
        return None
    return ref if state.repository.get_by_id(ref) is not None else None


def _parse_assignments(args: list[str]) -> dict[str, str]:
    """
    "title=Buy oat milk priority=high" -> {"title": "Buy oat milk", "priority": "high"}

    A word without "=" continues the previous value.
    """
    out: dict[str, str] = {}
    current: str | None = None
    for word in args:
        name, sep, value = word.partition("=")
        if sep and name.lower() in _EDIT_FIELDS:
            current = name.lower()
            out[current] = value
        elif current is not None:
            out[current] = f"{out[current]} {word}".strip()
        else:
            raise ValidationError(f"Expected field=value, got {word!r}")
    return out


def render_view(state: AppState, today: date | None = None) -> str:
    repo = state.repository
    tasks = repo.view(state.current_filter, state.current_search, state.current_sort, today=today)
    state.last_listing = [t.id for t in tasks]

    header = f"Tasks: {state.current_filter.value}, sorted by {state.current_sort.value}"
    if state.current_search:
        header += f", matching {state.current_search!r}"
    if not tasks:
        return f"{header}\n  (no tasks)"
    lines = [header]
    lines.extend(format_task_line(i, t, today) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add Buy milk !high #work @2024-01-05

    !priority, #category and @due-date tokens may appear anywhere.
    """
    title_words: list[str] = []
    fields: dict[str, str] = {}
    for word in args:
        if len(word) > 1 and word[0] == "!":
            fields["priority"] = word[1:]
        elif len(word) > 1 and word[0] == "#":
            fields["category"] = word[1:]
        elif len(word) > 1 and word[0] == "@":
            fields["due_date"] = word[1:]
        else:
            title_words.append(word)

    task = state.repository.add(" ".join(title_words), **fields)
    return f"Added: {task.title} ({task.id}){durability_note(state)}"


def cmd_list(state: AppState, args: list[str]) -> str:
    if args:
        return cmd_filter(state, args)
    return render_view(state)


def cmd_filter(state: AppState, args: list[str]) -> str:
    allowed = " | ".join(f.value for f in TaskFilter)
    if not args:
        return f"Filter is {state.current_filter.value}. Usage: /filter {allowed}"
    wanted = args[0].lower()
    if wanted not in {f.value for f in TaskFilter}:
        return f"Unknown filter {args[0]!r}. Usage: /filter {allowed}"
    state.current_filter = TaskFilter(wanted)
    return render_view(state)


def cmd_sort(state: AppState, args: list[str]) -> str:
    allowed = " | ".join(k.value for k in SortKey)
    if not args:
        return f"Sort is {state.current_sort.value}. Usage: /sort {allowed}"
    key = SortKey.from_value(args[0])
    if key.value.lower() != args[0].replace("_", "").lower():
        return f"Unknown sort key {args[0]!r}. Usage: /sort {allowed}"
    state.current_sort = key
    return render_view(state)


def cmd_search(state: AppState, args: list[str]) -> str:
    """/search <text> narrows the list; /search alone clears it."""
    state.current_search = " ".join(args).strip()
    return render_view(state)


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <number|id>"
    task_id = _resolve_ref(state, args[0])
    task = state.repository.toggle_complete(task_id) if task_id else None
    if task is None:
        return f"Task {args[0]} not found."
    status = "completed" if task.is_complete else "marked as pending"
    return f"Task {task.title!r} {status}.{durability_note(state)}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <number|id> title=... priority=... category=... due=YYYY-MM-DD
    due=none clears the due date.
    """
    if len(args) < 2:
        return "Usage: /edit <number|id> title=... priority=... category=... due=YYYY-MM-DD|none"
    task_id = _resolve_ref(state, args[0])
    if task_id is None:
        return f"Task {args[0]} not found."

    values: dict[str, str | None] = dict(_parse_assignments(args[1:]))
    if "due" in values:
        due = values.pop("due") or ""
        values["due_date"] = None if due.lower() in ("", "none", "-") else due
    task = state.repository.update(task_id, TaskUpdate.from_mapping(values))
    if task is None:
        return f"Task {args[0]} not found."
    return f"Updated: {task.title}{durability_note(state)}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <number|id>"
    task_id = _resolve_ref(state, args[0])
    if not task_id or not state.repository.delete(task_id):
        return f"Task {args[0]} not found."
    return f"Task deleted.{durability_note(state)}"


def cmd_clear_completed(state: AppState, args: list[str]) -> str:
    removed = state.repository.clear_completed()
    if removed == 0:
        return "No completed tasks to clear."
    return f"{removed} task(s) cleared.{durability_note(state)}"


def cmd_clear_all(state: AppState, args: list[str]) -> str:
    removed = state.repository.clear_all()
    state.last_listing = []
    return f"All {removed} task(s) deleted.{durability_note(state)}"


def cmd_stats(state: AppState, args: list[str]) -> str:
    s = state.repository.stats()
    return (
        "Stats:\n"
        f"  Total: {s.total}\n"
        f"  Completed: {s.completed}\n"
        f"  Pending: {s.pending}\n"
        f"  Overdue: {s.overdue}\n"
        f"  Completion: {s.completion_rate}%"
    )


def cmd_storage(state: AppState, args: list[str]) -> str:
    info = state.storage.storage_info()
    available = "yes" if state.storage_available else "NO (tasks are kept in memory only)"
    durable = "yes" if state.repository.is_durable else "no, last write failed"
    return (
        "Storage:\n"
        f"  Available: {available}\n"
        f"  Last write ok: {durable}\n"
        f"  Stored tasks: {info.task_count}\n"
        f"  Used: {info.used_kb} KB ({info.used_bytes} bytes)"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add Title !high #work @2024-01-05.", aliases=["a"])
registry.register("list", cmd_list, help_text="Show tasks (current filter/sort/search).", aliases=["ls", "l"])
registry.register("filter", cmd_filter, help_text="Filter: /filter all | pending | completed | overdue.")
registry.register(
    "sort", cmd_sort, help_text="Sort: /sort dateCreated | dueDate | priority | alphabetical."
)
registry.register("search", cmd_search, help_text="Search titles: /search text (no text clears).")
registry.register("done", cmd_done, help_text="Toggle completion: /done <number|id>.", aliases=["x"])
registry.register(
    "edit", cmd_edit, help_text="Edit: /edit <number|id> title=... priority=... category=... due=..."
)
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <number|id>.", aliases=["del"])
registry.register("clear-completed", cmd_clear_completed, help_text="Delete all completed tasks.")
registry.register("clear-all", cmd_clear_all, help_text="Delete ALL tasks.")
registry.register("stats", cmd_stats, help_text="Show totals and completion rate.")
registry.register("storage", cmd_storage, help_text="Show storage status and usage.")
