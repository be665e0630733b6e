# src/task_notifier/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole job, passed explicitly to the code that needs it.
- No secrets required at import time; missing credentials fail when the job is wired.
- Legacy unprefixed names (SUPABASE_URL, VAPID_PRIVATE_KEY, ...) are still accepted.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .core.errors import ConfigError

ENV_PREFIX = "NOTIFIER"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


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


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path | None

    # ---- Supabase ----
    supabase_url: str
    supabase_service_key: str

    # ---- Web Push (VAPID) ----
    vapid_private_key: str
    vapid_subject: str
    push_ttl_seconds: int

    # ---- Schedule ----
    run_interval_minutes: int
    tz_offset_hours: float
    events_summary_hour: int
    in_progress_summary_hour: int
    overdue_summary_hour: int
    summary_gate_minutes: int
    max_concurrency: int
    loop: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-notifier")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_dir = _env_path(_k("LOG_DIR"))

        supabase_url = (_first_env(_k("SUPABASE_URL"), "SUPABASE_URL", default="") or "").strip()
        supabase_service_key = (
            _first_env(_k("SUPABASE_SERVICE_KEY"), "SUPABASE_SERVICE_KEY", default="") or ""
        ).strip()

        vapid_private_key = (_first_env(_k("VAPID_PRIVATE_KEY"), "VAPID_PRIVATE_KEY", default="") or "").strip()
        vapid_subject = _env(_k("VAPID_SUBJECT"), "mailto:admin@example.com")
        push_ttl_seconds = _env_int(_k("PUSH_TTL_SECONDS"), 24 * 60 * 60)

        run_interval_minutes = max(1, _env_int(_k("RUN_INTERVAL_MINUTES"), 5))
        # Gate defaults to the run interval so each daily summary lands in exactly one run.
        summary_gate_minutes = _env_int(_k("SUMMARY_GATE_MINUTES"), run_interval_minutes)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            supabase_url=supabase_url,
            supabase_service_key=supabase_service_key,
            vapid_private_key=vapid_private_key,
            vapid_subject=vapid_subject,
            push_ttl_seconds=push_ttl_seconds,
            run_interval_minutes=run_interval_minutes,
            tz_offset_hours=_env_float(_k("TZ_OFFSET_HOURS"), 3.0),
            events_summary_hour=_env_int(_k("EVENTS_SUMMARY_HOUR"), 7),
            in_progress_summary_hour=_env_int(_k("IN_PROGRESS_SUMMARY_HOUR"), 8),
            overdue_summary_hour=_env_int(_k("OVERDUE_SUMMARY_HOUR"), 9),
            summary_gate_minutes=summary_gate_minutes,
            max_concurrency=max(1, _env_int(_k("MAX_CONCURRENCY"), 4)),
            loop=_env_bool(_k("LOOP"), False),
        )

    def require_credentials(self) -> None:
        """Raise ConfigError naming every credential that is missing."""
        missing = [
            name
            for name, value in (
                (_k("SUPABASE_URL"), self.supabase_url),
                (_k("SUPABASE_SERVICE_KEY"), self.supabase_service_key),
                (_k("VAPID_PRIVATE_KEY"), self.vapid_private_key),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    # A local .env never overrides the real environment.
    load_dotenv(override=False)
    return Settings.from_env()
