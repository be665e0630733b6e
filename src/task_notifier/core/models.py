# src/task_notifier/core/models.py

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any, Literal


class TaskStatus(StrEnum):
    """
    Task status as stored in the database.

    The board writes the Arabic labels; only the two statuses that drive
    notifications are modelled, anything else maps to None.
    """

    PLANNING = "تخطيط"
    IN_PROGRESS = "تنفيذ"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus | None:
        if not raw:
            return None
        try:
            return cls(raw.strip())
        except ValueError:
            return None


# Task timestamp a query ranges over.
TaskTimeField = Literal["start_at", "due_at"]


class ItemKind(StrEnum):
    TASK = "task"
    EVENT = "event"


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(raw: Any) -> datetime | None:
    """Parse a timestamp column (ISO string or datetime) into an aware UTC datetime."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return as_utc(raw)
    return as_utc(datetime.fromisoformat(str(raw).replace("Z", "+00:00")))


@dataclass(slots=True, frozen=True)
class Subscriber:
    name: str
    push_subscription: dict[str, Any] | None

    @property
    def is_subscribed(self) -> bool:
        return bool(self.push_subscription)


@dataclass(slots=True, frozen=True)
class Event:
    id: int | str | None
    owner: str
    title: str
    event_at: datetime
    is_shared: bool = False


@dataclass(slots=True, frozen=True)
class Task:
    id: int | str | None
    owner: str
    title: str
    status: TaskStatus | None
    start_at: datetime | None = None
    due_at: datetime | None = None
    is_shared: bool = False


@dataclass(slots=True, frozen=True)
class SharingChange:
    """An item whose sharing flag was toggled by its owner."""

    kind: ItemKind
    owner: str
    title: str
    is_shared: bool
    changed_at: datetime


@dataclass(slots=True, frozen=True)
class ReminderRule:
    """Fire `lead` before an item's timestamp with the given title/body template."""

    lead: timedelta
    title: str
    body_template: str

    def render(self, item_title: str) -> PushMessage:
        return PushMessage(title=self.title, body=self.body_template.format(title=item_title))


@dataclass(slots=True, frozen=True)
class PushMessage:
    title: str
    body: str

    def to_payload(self) -> str:
        return json.dumps({"title": self.title, "body": self.body}, ensure_ascii=False)
