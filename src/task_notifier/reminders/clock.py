# src/task_notifier/reminders/clock.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from ..core.models import as_utc


@dataclass(slots=True, frozen=True)
class RunClock:
    """
    "now" for one run plus a fixed-offset wall clock.

    The offset clock approximates the board's timezone (no DST, no tz database).
    It is only used for calendar-local decisions: summary hours, "today"
    boundaries and the HH:MM shown in summaries. All comparisons with item
    timestamps use `now` in UTC.
    """

    now: datetime
    offset: timedelta

    def __post_init__(self) -> None:
        object.__setattr__(self, "now", as_utc(self.now))

    @property
    def local(self) -> datetime:
        # Naive on purpose: this is wall-clock time in the offset zone.
        return (self.now + self.offset).replace(tzinfo=None)

    @property
    def hour(self) -> int:
        return self.local.hour

    @property
    def minute(self) -> int:
        return self.local.minute

    def in_gate(self, hour: int, gate_minutes: int) -> bool:
        """True during the first `gate_minutes` of local `hour`."""
        return self.hour == hour and 0 <= self.minute < gate_minutes

    def local_day_bounds(self) -> tuple[datetime, datetime]:
        """UTC instants of local 00:00:00 and 23:59:59.999999 of the current local day."""
        day = self.local.date()
        start_local = datetime.combine(day, time.min)
        end_local = datetime.combine(day, time.max)
        return (
            as_utc(start_local - self.offset),
            as_utc(end_local - self.offset),
        )

    def format_local_time(self, instant: datetime) -> str:
        return (as_utc(instant) + self.offset).strftime("%H:%M")
