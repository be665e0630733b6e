# tests/test_clock_and_messages.py

from __future__ import annotations

from datetime import timedelta

from task_notifier.core.models import Event, ItemKind, SharingChange, Task, TaskStatus
from task_notifier.reminders import messages
from task_notifier.reminders.clock import RunClock

from .fakes import utc

RIYADH = timedelta(hours=3)


def test_clock_uses_fixed_offset_for_local_hour() -> None:
    clock = RunClock(now=utc(2024, 1, 1, 4, 2), offset=RIYADH)

    assert (clock.hour, clock.minute) == (7, 2)
    assert clock.in_gate(7, 5)
    assert not clock.in_gate(8, 5)
    assert not RunClock(now=utc(2024, 1, 1, 4, 5), offset=RIYADH).in_gate(7, 5)


def test_local_day_bounds_cross_utc_midnight() -> None:
    # 22:30 UTC on Jan 1 is already Jan 2 in UTC+3.
    clock = RunClock(now=utc(2024, 1, 1, 22, 30), offset=RIYADH)
    start, end = clock.local_day_bounds()

    assert start == utc(2024, 1, 1, 21, 0)
    assert end == utc(2024, 1, 2, 20, 59, 59, 999999)


def test_format_local_time() -> None:
    clock = RunClock(now=utc(2024, 1, 1, 4, 0), offset=RIYADH)
    assert clock.format_local_time(utc(2024, 1, 1, 6, 30)) == "09:30"


def test_events_summary_lists_local_times() -> None:
    clock = RunClock(now=utc(2024, 1, 1, 4, 0), offset=RIYADH)
    events = [
        Event(id=1, owner="Sara", title="Dentist", event_at=utc(2024, 1, 1, 6, 30)),
        Event(id=2, owner="Sara", title="Review", event_at=utc(2024, 1, 1, 11, 0)),
    ]

    msg = messages.events_summary(events, clock)

    assert msg.title == "Today's appointments (2)"
    assert msg.body == "You have the following appointments today: 09:30 Dentist, 14:00 Review"


def test_empty_summaries_use_none_messages() -> None:
    clock = RunClock(now=utc(2024, 1, 1, 4, 0), offset=RIYADH)

    assert messages.events_summary([], clock).body == "You have no appointments today."
    assert messages.in_progress_summary([]).body == "You have no tasks in progress."
    assert messages.overdue_summary([]).body == "You have no overdue tasks."


def test_task_summaries() -> None:
    tasks = [
        Task(id=1, owner="Sara", title="Report", status=TaskStatus.IN_PROGRESS),
        Task(id=2, owner="Omar", title="Budget", status=TaskStatus.IN_PROGRESS, is_shared=True),
    ]

    assert messages.in_progress_summary(tasks).title == "You have 2 tasks in progress"
    assert messages.in_progress_summary(tasks).body == "Report, Budget"
    assert messages.overdue_summary(tasks).body == "Overdue tasks: Report, Budget"


def test_sharing_notice_wording() -> None:
    shared = SharingChange(ItemKind.TASK, "Omar", "Budget", True, utc(2024, 1, 1))
    unshared = SharingChange(ItemKind.EVENT, "Omar", "Offsite", False, utc(2024, 1, 1))

    assert messages.sharing_notice(shared).body == 'Omar shared the task "Budget".'
    assert messages.sharing_notice(unshared).body == 'Omar stopped sharing the appointment "Offsite".'


def test_status_from_db() -> None:
    assert TaskStatus.from_db("تنفيذ") is TaskStatus.IN_PROGRESS
    assert TaskStatus.from_db(" تخطيط ") is TaskStatus.PLANNING
    assert TaskStatus.from_db("done") is None
    assert TaskStatus.from_db(None) is None
