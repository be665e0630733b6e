# src/task_notifier/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the dispatcher.

The dispatcher depends on Protocols instead of concrete implementations.
This keeps the store and the push transport swappable and makes testing easier.
"""

from collections.abc import Awaitable
from datetime import datetime
from typing import Any, Protocol

from .models import Event, SharingChange, Subscriber, Task, TaskStatus, TaskTimeField


class NotificationStore(Protocol):
    """
    Read side of the board plus the single write the job performs.

    Every item query is already filtered by visibility:
    owner == viewer OR is_shared is true.
    Range bounds are optional and combine with AND.
    Implementations raise StoreError on failure.
    """

    def list_subscribers(self) -> Awaitable[list[Subscriber]]: ...

    def list_events(
            self,
            viewer: str,
            *,
            gte: datetime | None = None,
            lte: datetime | None = None,
    ) -> Awaitable[list[Event]]: ...

    def list_tasks(
            self,
            viewer: str,
            *,
            status: TaskStatus,
            field: TaskTimeField,
            gte: datetime | None = None,
            lte: datetime | None = None,
            lt: datetime | None = None,
    ) -> Awaitable[list[Task]]: ...

    def list_sharing_changes(self, *, after: datetime, until: datetime) -> Awaitable[list[SharingChange]]: ...

    def clear_subscription(self, name: str) -> Awaitable[None]: ...


class PushTransport(Protocol):
    """
    Delivers one payload to one push subscription.

    Raises SubscriptionGone when the endpoint no longer exists,
    PushError for every other failure.
    """

    def send(self, subscription: dict[str, Any], payload: str) -> Awaitable[None]: ...
