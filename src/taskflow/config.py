# src/taskflow/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

One Settings object for the whole app; nothing is read at call sites.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKFLOW"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_to_file: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Storage ----
    storage_key: str
    storage_quota_bytes: int

    # ---- Initial view ----
    default_filter: str
    default_sort: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskflow").strip() or "taskflow"
        log_level = _env(_k("LOG_LEVEL"), "WARNING")
        log_to_file = _env_bool(_k("LOG_TO_FILE"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskflow"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        storage_key = _env(_k("STORAGE_KEY"), "taskflow_tasks").strip() or "taskflow_tasks"
        # 0 disables the quota.
        storage_quota_bytes = max(0, _env_int(_k("STORAGE_QUOTA_BYTES"), 5 * 1024 * 1024))

        default_filter = _env(_k("DEFAULT_FILTER"), "all")
        default_sort = _env(_k("DEFAULT_SORT"), "dateCreated")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_to_file=log_to_file,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            storage_key=storage_key,
            storage_quota_bytes=storage_quota_bytes,
            default_filter=default_filter,
            default_sort=default_sort,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
