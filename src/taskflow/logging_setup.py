# src/taskflow/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Only the app's own loggers reach the console below ERROR.

    Everything else (third-party libraries, 'py.warnings') must be ERROR+.
    """

    def __init__(self, app_logger: str = "taskflow") -> None:
        super().__init__()
        self._app_logger = app_logger

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == self._app_logger or name.startswith(self._app_logger + "."):
            return True
        return record.levelno >= logging.ERROR


def resolve_level(name: Any, default: int = logging.WARNING) -> int:
    """Map a level name such as "info" to its number; unknown names give `default`."""
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


def log_file_name(app_name: str) -> str:
    stem = "".join(c if c.isalnum() or c in "-_" else "_" for c in app_name.strip())
    return f"{stem or 'taskflow'}.log"


def setup_logging(
    *,
    app_name: str = "taskflow",
    log_dir: str | Path | None = None,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path | None:
    """
    Configure the root logger for a console session.

    The console handler stays at WARNING+ by default so log lines do not
    interleave with the task list. With `log_dir` set, everything from DEBUG
    up also goes to `<log_dir>/<app_name>.log`. Returns that path, or None.

    Call once at startup; calling again replaces the previous handlers.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    log_path: Path | None = None
    if log_dir is not None:
        log_path = Path(log_dir) / log_file_name(app_name)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
    return log_path


def setup_logging_from_settings(settings: Any) -> Path | None:
    """Apply `log_level`, `log_to_file`, `data_dir` and `app_name` from Settings."""
    return setup_logging(
        app_name=str(getattr(settings, "app_name", "taskflow")),
        log_dir=settings.data_dir if getattr(settings, "log_to_file", False) else None,
        console_level=resolve_level(getattr(settings, "log_level", None)),
    )
