"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _env_list(name: str) -> tuple[str, ...]:
    """Split a comma separated variable into trimmed, non-empty entries."""

    raw = os.getenv(name, "")
    return tuple(part.strip() for part in raw.split(",") if part.strip())


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "finwatch"
    DB_FILENAME = "finwatch.db"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("FINWATCH_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("FINWATCH_DATABASE_URL", self._build_sqlite_url())

        # Categories used to correct balances; never counted as spending.
        self.ADJUSTMENT_CATEGORIES = _env_list("FINWATCH_ADJUSTMENT_CATEGORIES")

        self.NOTIFICATION_RETENTION_DAYS = _env_int("FINWATCH_NOTIFICATION_RETENTION_DAYS", 30)
        self.NOTIFICATION_MAX_RECORDS = _env_int("FINWATCH_NOTIFICATION_MAX_RECORDS", 100)
        self.DEBOUNCE_MS = _env_int("FINWATCH_DEBOUNCE_MS", 1000)
        self.MAX_VISIBLE_POPUPS = _env_int("FINWATCH_MAX_VISIBLE_POPUPS", 3)
        self.POPUP_POLL_SECONDS = _env_int("FINWATCH_POPUP_POLL_SECONDS", 1)
        self.SWEEP_INTERVAL_MINUTES = _env_int("FINWATCH_SWEEP_INTERVAL_MINUTES", 5)

        if self.NOTIFICATION_MAX_RECORDS <= 0:
            raise ValueError("FINWATCH_NOTIFICATION_MAX_RECORDS must be positive.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("FINWATCH_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration for the test-suite: in-memory database."""

    DEBUG = True
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = "sqlite://"
