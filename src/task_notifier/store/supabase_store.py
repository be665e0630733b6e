# src/task_notifier/store/supabase_store.py

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from supabase import Client, create_client

from ..core.errors import ConfigError, StoreError
from ..core.models import (
    Event,
    ItemKind,
    SharingChange,
    Subscriber,
    Task,
    TaskStatus,
    TaskTimeField,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

USERS = "users"
TASKS = "tasks"
EVENTS = "events"

EVENT_COLUMNS = "id, title, owner, is_shared, event_date"
TASK_COLUMNS = "id, title, owner, is_shared, status, start_datetime, due_datetime"
SHARING_COLUMNS = "title, owner, is_shared, shared_changed_at"
SHARE_CHANGED_AT = "shared_changed_at"

TASK_TIME_COLUMNS: dict[str, str] = {
    "start_at": "start_datetime",
    "due_at": "due_datetime",
}

# Characters that must be quoted inside a PostgREST or=(...) filter value.
_POSTGREST_RESERVED = set(',.:()"\\ ')


def _quote(value: str) -> str:
    if not any(ch in _POSTGREST_RESERVED for ch in value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def visibility_filter(viewer: str) -> str:
    """PostgREST or-filter: owned by the viewer or shared with everyone."""
    return f"owner.eq.{_quote(viewer)},is_shared.eq.true"


def _iso(value: datetime) -> str:
    return value.isoformat()


def _subscription(raw: Any) -> dict[str, Any] | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, dict):
        return raw
    try:
        val = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparsable push_subscription value")
        return None
    return val if isinstance(val, dict) else None


def _timestamp(row: dict[str, Any], column: str) -> datetime | None:
    try:
        return parse_timestamp(row.get(column))
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed %s=%r id=%r", column, row.get(column), row.get("id"))
        return None


class SupabaseStore:
    """
    NotificationStore backed by Supabase (PostgREST).

    The supabase client is synchronous; every query runs in a worker thread
    so subscribers can be processed concurrently.
    """

    def __init__(self, client: Client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> SupabaseStore:
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ConfigError("Supabase URL and service key are required")
        return cls(create_client(settings.supabase_url, settings.supabase_service_key))

    async def _run(self, what: str, fn: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(fn)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"{what} failed: {e}") from e

    @staticmethod
    def _rows(response: Any) -> list[dict[str, Any]]:
        data = getattr(response, "data", None)
        return list(data or [])

    # ---- subscribers ----

    async def list_subscribers(self) -> list[Subscriber]:
        def _query() -> list[Subscriber]:
            response = (
                self._client.table(USERS)
                .select("name, push_subscription")
                .not_.is_("push_subscription", "null")
                .execute()
            )
            return [
                Subscriber(name=str(row["name"]), push_subscription=_subscription(row.get("push_subscription")))
                for row in self._rows(response)
            ]

        return await self._run("Fetching users", _query)

    async def clear_subscription(self, name: str) -> None:
        def _update() -> None:
            self._client.table(USERS).update({"push_subscription": None}).eq("name", name).execute()

        await self._run(f"Clearing subscription of {name}", _update)
        logger.info("Cleared push subscription user=%s", name)

    # ---- items ----

    async def list_events(
            self,
            viewer: str,
            *,
            gte: datetime | None = None,
            lte: datetime | None = None,
    ) -> list[Event]:
        def _query() -> list[Event]:
            query = self._client.table(EVENTS).select(EVENT_COLUMNS).or_(visibility_filter(viewer))
            if gte is not None:
                query = query.gte("event_date", _iso(gte))
            if lte is not None:
                query = query.lte("event_date", _iso(lte))
            response = query.order("event_date").execute()
            events = (self._row_to_event(r) for r in self._rows(response))
            return [e for e in events if e is not None]

        return await self._run("Fetching events", _query)

    async def list_tasks(
            self,
            viewer: str,
            *,
            status: TaskStatus,
            field: TaskTimeField,
            gte: datetime | None = None,
            lte: datetime | None = None,
            lt: datetime | None = None,
    ) -> list[Task]:
        column = TASK_TIME_COLUMNS.get(field)
        if column is None:
            raise ValueError(f"Unknown task time field: {field!r}")

        def _query() -> list[Task]:
            query = (
                self._client.table(TASKS)
                .select(TASK_COLUMNS)
                .or_(visibility_filter(viewer))
                .eq("status", status.value)
            )
            if gte is not None:
                query = query.gte(column, _iso(gte))
            if lte is not None:
                query = query.lte(column, _iso(lte))
            if lt is not None:
                query = query.lt(column, _iso(lt))
            response = query.order(column).execute()
            return [self._row_to_task(r) for r in self._rows(response)]

        return await self._run("Fetching tasks", _query)

    async def list_sharing_changes(self, *, after: datetime, until: datetime) -> list[SharingChange]:
        def _query(table: str, kind: ItemKind) -> list[SharingChange]:
            response = (
                self._client.table(table)
                .select(SHARING_COLUMNS)
                .gt(SHARE_CHANGED_AT, _iso(after))
                .lte(SHARE_CHANGED_AT, _iso(until))
                .order(SHARE_CHANGED_AT)
                .execute()
            )
            out: list[SharingChange] = []
            for row in self._rows(response):
                changed_at = _timestamp(row, SHARE_CHANGED_AT)
                if changed_at is None:
                    continue
                out.append(
                    SharingChange(
                        kind=kind,
                        owner=str(row.get("owner") or ""),
                        title=str(row.get("title") or ""),
                        is_shared=bool(row.get("is_shared")),
                        changed_at=changed_at,
                    )
                )
            return out

        tasks = await self._run("Fetching task sharing changes", lambda: _query(TASKS, ItemKind.TASK))
        events = await self._run("Fetching event sharing changes", lambda: _query(EVENTS, ItemKind.EVENT))
        return sorted(tasks + events, key=lambda c: c.changed_at)

    # ---- row mapping ----

    @staticmethod
    def _row_to_event(row: dict[str, Any]) -> Event | None:
        event_at = _timestamp(row, "event_date")
        if event_at is None:
            logger.warning("Skipping event id=%r without a usable event_date", row.get("id"))
            return None
        return Event(
            id=row.get("id"),
            owner=str(row.get("owner") or ""),
            title=str(row.get("title") or ""),
            event_at=event_at,
            is_shared=bool(row.get("is_shared")),
        )

    @staticmethod
    def _row_to_task(row: dict[str, Any]) -> Task:
        return Task(
            id=row.get("id"),
            owner=str(row.get("owner") or ""),
            title=str(row.get("title") or ""),
            status=TaskStatus.from_db(row.get("status")),
            start_at=_timestamp(row, "start_datetime"),
            due_at=_timestamp(row, "due_datetime"),
            is_shared=bool(row.get("is_shared")),
        )
