# src/task_notifier/reminders/rules.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta

from ..core.models import ReminderRule

APPOINTMENT_REMINDER = "Appointment reminder"

EVENT_RULES: tuple[ReminderRule, ...] = (
    ReminderRule(timedelta(hours=48), APPOINTMENT_REMINDER, 'Appointment "{title}" is in 48 hours.'),
    ReminderRule(timedelta(hours=24), APPOINTMENT_REMINDER, 'Appointment "{title}" is tomorrow.'),
    ReminderRule(timedelta(hours=2), APPOINTMENT_REMINDER, 'Appointment "{title}" is in 2 hours.'),
    ReminderRule(timedelta(0), APPOINTMENT_REMINDER, 'Appointment "{title}" is starting now.'),
)

# Planning tasks: remind the day before work is supposed to start.
PLANNING_TASK_RULES: tuple[ReminderRule, ...] = (
    ReminderRule(timedelta(hours=24), "Task starting", 'Work on task "{title}" starts tomorrow.'),
)

# In-progress tasks: remind the day before the deadline.
IN_PROGRESS_TASK_RULES: tuple[ReminderRule, ...] = (
    ReminderRule(timedelta(hours=24), "Task deadline", 'The deadline for task "{title}" is tomorrow.'),
)


def max_lead(rules: Iterable[ReminderRule]) -> timedelta:
    return max((r.lead for r in rules), default=timedelta(0))
