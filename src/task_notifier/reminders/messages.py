# src/task_notifier/reminders/messages.py

"""
Message composition.

Pure functions turning query results into PushMessage objects.
Summaries never produce an empty body: an empty result yields the "none" variant.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..core.models import Event, ItemKind, PushMessage, SharingChange, Task
from .clock import RunClock

SEPARATOR = ", "

_KIND_NOUN = {
    ItemKind.TASK: "task",
    ItemKind.EVENT: "appointment",
}


def _titles(items: Sequence[Task | Event]) -> str:
    return SEPARATOR.join(i.title for i in items)


def events_summary(events: Sequence[Event], clock: RunClock) -> PushMessage:
    if not events:
        return PushMessage(title="Today's appointments", body="You have no appointments today.")

    entries = SEPARATOR.join(f"{clock.format_local_time(e.event_at)} {e.title}" for e in events)
    return PushMessage(
        title=f"Today's appointments ({len(events)})",
        body=f"You have the following appointments today: {entries}",
    )


def in_progress_summary(tasks: Sequence[Task]) -> PushMessage:
    if not tasks:
        return PushMessage(title="Tasks in progress", body="You have no tasks in progress.")
    return PushMessage(title=f"You have {len(tasks)} tasks in progress", body=_titles(tasks))


def overdue_summary(tasks: Sequence[Task]) -> PushMessage:
    if not tasks:
        return PushMessage(title="Overdue tasks", body="You have no overdue tasks.")
    return PushMessage(title=f"You have {len(tasks)} overdue tasks", body=f"Overdue tasks: {_titles(tasks)}")


def sharing_notice(change: SharingChange) -> PushMessage:
    noun = _KIND_NOUN.get(change.kind, "item")
    if change.is_shared:
        return PushMessage(
            title=f"Shared {noun}",
            body=f'{change.owner} shared the {noun} "{change.title}".',
        )
    return PushMessage(
        title=f"Unshared {noun}",
        body=f'{change.owner} stopped sharing the {noun} "{change.title}".',
    )
