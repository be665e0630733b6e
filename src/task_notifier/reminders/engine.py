# src/task_notifier/reminders/engine.py

"""
Reminder decision engine.

The job is not running continuously: it is woken up every `window`
(e.g. every 5 minutes) and has to decide, for each (target, lead) pair,
whether *this* run is the one that owns the reminder.

A run at `now` owns every reminder instant in the half-open interval

    (now - window, now]

so consecutive runs exactly `window` apart partition the time line and each
reminder instant is claimed by exactly one run. Nothing is persisted: a run
that is skipped or delayed past `window` loses the reminders that fell into
its interval. Keeping the scheduler cadence equal to `window` is a contract
of the deployment, not something enforced here.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..core.models import as_utc

logger = logging.getLogger(__name__)


def reminder_instant(target: datetime, lead: timedelta) -> datetime:
    return as_utc(target) - lead


def should_fire(target: datetime, now: datetime, lead: timedelta, window: timedelta) -> bool:
    """Return True iff `target - lead` lies in (now - window, now]."""
    if window <= timedelta(0):
        raise ValueError(f"window must be positive, got {window!r}")

    instant = reminder_instant(target, lead)
    now = as_utc(now)
    fire = now - window < instant <= now

    logger.debug(
        "should_fire target=%s lead=%s instant=%s window_start=%s now=%s -> %s",
        target.isoformat(),
        lead,
        instant.isoformat(),
        (now - window).isoformat(),
        now.isoformat(),
        fire,
    )
    return fire
