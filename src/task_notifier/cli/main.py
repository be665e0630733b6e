# src/task_notifier/cli/main.py

"""
CLI entrypoint.

Meant to be triggered by an external scheduler (cron, Netlify/Vercel cron,
Kubernetes CronJob) once per run interval. Each invocation performs exactly
one run and exits 0 on success, 1 on failure.

With NOTIFIER_LOOP=true the process stays up and runs itself on ticks aligned
to the run interval instead (for hosts without an external scheduler).
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from ..config import Settings, get_settings
from ..logging_setup import setup_logging
from ..reminders.dispatcher import NotificationDispatcher
from .bootstrap import create_dispatcher

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RunResult:
    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return self.status_code < 400


async def run_once(
        settings: Settings | None = None,
        *,
        dispatcher: NotificationDispatcher | None = None,
) -> RunResult:
    """Run the dispatcher once; never raises, the outcome is in the RunResult."""
    logger.info("--- Starting notification run ---")
    try:
        if dispatcher is None:
            dispatcher = create_dispatcher(settings=settings)
        report = await dispatcher.run()
    except Exception as e:
        logger.exception("FATAL error in notification run")
        return RunResult(status_code=500, body=f"Error: {e}")

    for name in report.failed_subscribers:
        logger.warning("Subscriber %s failed this run", name)
    logger.info("--- Notification run finished ---")
    return RunResult(status_code=200, body=report.summary())


def seconds_until_next_tick(now_ts: float, interval_seconds: float) -> float:
    """Seconds until the next wall-clock multiple of interval_seconds."""
    remaining = interval_seconds - (now_ts % interval_seconds)
    return remaining if remaining > 0 else interval_seconds


async def run_forever(settings: Settings) -> None:
    """
    Run on ticks aligned to the run interval, so every run covers exactly one window.

    To stop, cancel the coroutine/task (or Ctrl+C).
    """
    interval_s = float(settings.run_interval_minutes * 60)
    dispatcher = create_dispatcher(settings=settings)

    while True:
        await asyncio.sleep(seconds_until_next_tick(time.time(), interval_s))
        result = await run_once(settings, dispatcher=dispatcher)
        logger.info("Run result status=%s body=%s", result.status_code, result.body)


def main() -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    if settings.loop:
        try:
            asyncio.run(run_forever(settings))
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down...")
        except Exception:
            logger.exception("FATAL error, notifier loop stopped")
            return 1
        return 0

    result = asyncio.run(run_once(settings))
    logger.info("Run result status=%s body=%s", result.status_code, result.body)
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
