# src/taskshift/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
- Settings are passed into AppState explicitly, never read as ambient globals.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKSHIFT"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


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


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
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

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_db_path: Path
    alarms_db_path: Path

    # ---- Schedule ----
    rollover_hour: int
    rollover_minute: int
    hourly_period_minutes: int
    alert_list_limit: int

    # ---- Alarm loop ----
    poll_interval_seconds: float
    watchdog_delay_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskshift") or "taskshift"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskshift"))
        store_db_path = _env_path(_k("STORE_DB_PATH"), data_dir / "store.sqlite3")
        alarms_db_path = _env_path(_k("ALARMS_DB_PATH"), data_dir / "alarms.sqlite3")

        # Clamp to a valid wall-clock time; a bad env value should not crash startup.
        rollover_hour = min(23, max(0, _env_int(_k("ROLLOVER_HOUR"), 21)))
        rollover_minute = min(59, max(0, _env_int(_k("ROLLOVER_MINUTE"), 0)))
        hourly_period_minutes = max(1, _env_int(_k("HOURLY_PERIOD_MINUTES"), 60))
        alert_list_limit = max(1, _env_int(_k("ALERT_LIST_LIMIT"), 5))

        poll_interval_seconds = max(0.5, _env_float(_k("POLL_INTERVAL_SECONDS"), 15.0))
        watchdog_delay_seconds = max(0.0, _env_float(_k("WATCHDOG_DELAY_SECONDS"), 2.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            store_db_path=store_db_path,
            alarms_db_path=alarms_db_path,
            rollover_hour=rollover_hour,
            rollover_minute=rollover_minute,
            hourly_period_minutes=hourly_period_minutes,
            alert_list_limit=alert_list_limit,
            poll_interval_seconds=poll_interval_seconds,
            watchdog_delay_seconds=watchdog_delay_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
