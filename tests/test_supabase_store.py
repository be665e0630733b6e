# tests/test_supabase_store.py

from __future__ import annotations

import json

import pytest

from task_notifier.core.errors import StoreError
from task_notifier.core.models import ItemKind, TaskStatus
from task_notifier.store.supabase_store import SupabaseStore, visibility_filter

from .fakes import FakeSupabaseClient, subscription_for, utc


def test_visibility_filter_quotes_reserved_characters() -> None:
    assert visibility_filter("Sara") == "owner.eq.Sara,is_shared.eq.true"
    assert visibility_filter("Al-Sayed, Omar") == 'owner.eq."Al-Sayed, Omar",is_shared.eq.true'


@pytest.mark.asyncio
async def test_list_subscribers_filters_null_and_parses_json() -> None:
    client = FakeSupabaseClient(
        {
            "users": [
                {"name": "Sara", "push_subscription": subscription_for("Sara")},
                {"name": "Omar", "push_subscription": json.dumps(subscription_for("Omar"))},
            ]
        }
    )
    store = SupabaseStore(client)

    subscribers = await store.list_subscribers()

    assert [s.name for s in subscribers] == ["Sara", "Omar"]
    assert subscribers[1].push_subscription == subscription_for("Omar")
    q = client.queries[0]
    assert q.table == "users"
    assert q.names() == ["select", "not_", "is_"]
    assert q.args_of("is_") == [("push_subscription", "null")]


@pytest.mark.asyncio
async def test_list_events_applies_visibility_and_range() -> None:
    client = FakeSupabaseClient(
        {"events": [{"id": 7, "title": "Dentist", "owner": "Sara", "is_shared": False,
                     "event_date": "2024-01-02T10:00:00+00:00"}]}
    )
    store = SupabaseStore(client)

    events = await store.list_events("Sara", gte=utc(2024, 1, 1), lte=utc(2024, 1, 3))

    assert len(events) == 1
    assert events[0].event_at == utc(2024, 1, 2, 10, 0)
    q = client.queries[0]
    assert q.args_of("or_") == [("owner.eq.Sara,is_shared.eq.true",)]
    assert q.args_of("gte") == [("event_date", utc(2024, 1, 1).isoformat())]
    assert q.args_of("lte") == [("event_date", utc(2024, 1, 3).isoformat())]
    assert q.args_of("order") == [("event_date",)]


@pytest.mark.asyncio
async def test_list_tasks_maps_columns_and_status() -> None:
    client = FakeSupabaseClient(
        {"tasks": [{"id": 1, "title": "Ship", "owner": "Omar", "is_shared": True, "status": "تنفيذ",
                    "start_datetime": None, "due_datetime": "2024-01-02T10:00:00Z"}]}
    )
    store = SupabaseStore(client)

    tasks = await store.list_tasks("Sara", status=TaskStatus.IN_PROGRESS, field="due_at", lt=utc(2024, 1, 5))

    assert tasks[0].status is TaskStatus.IN_PROGRESS
    assert tasks[0].due_at == utc(2024, 1, 2, 10, 0)
    assert tasks[0].start_at is None
    q = client.queries[0]
    assert q.args_of("eq") == [("status", "تنفيذ")]
    assert q.args_of("lt") == [("due_datetime", utc(2024, 1, 5).isoformat())]
    assert q.args_of("gte") == []


@pytest.mark.asyncio
async def test_list_sharing_changes_merges_tables() -> None:
    client = FakeSupabaseClient(
        {
            "tasks": [{"title": "Budget", "owner": "Omar", "is_shared": True,
                       "shared_changed_at": "2024-01-01T09:58:00+00:00"}],
            "events": [{"title": "Offsite", "owner": "Sara", "is_shared": False,
                        "shared_changed_at": "2024-01-01T09:56:00+00:00"}],
        }
    )
    store = SupabaseStore(client)

    changes = await store.list_sharing_changes(after=utc(2024, 1, 1, 9, 55), until=utc(2024, 1, 1, 10, 0))

    assert [(c.kind, c.title) for c in changes] == [(ItemKind.EVENT, "Offsite"), (ItemKind.TASK, "Budget")]
    assert client.queries[0].args_of("gt") == [("shared_changed_at", utc(2024, 1, 1, 9, 55).isoformat())]


@pytest.mark.asyncio
async def test_clear_subscription_is_keyed_by_name() -> None:
    client = FakeSupabaseClient()
    store = SupabaseStore(client)

    await store.clear_subscription("Sara")

    q = client.queries[0]
    assert q.table == "users"
    assert q.args_of("update") == [({"push_subscription": None},)]
    assert q.args_of("eq") == [("name", "Sara")]


@pytest.mark.asyncio
async def test_client_errors_become_store_errors() -> None:
    client = FakeSupabaseClient()
    client.error = RuntimeError("JWT expired")
    store = SupabaseStore(client)

    with pytest.raises(StoreError, match="JWT expired"):
        await store.list_subscribers()


@pytest.mark.asyncio
async def test_rows_with_bad_timestamps_are_skipped_not_fatal() -> None:
    client = FakeSupabaseClient(
        {
            "events": [
                {"id": 1, "title": "Good", "owner": "Sara", "is_shared": False,
                 "event_date": "2024-01-02T10:00:00+00:00"},
                {"id": 2, "title": "Missing", "owner": "Sara", "is_shared": False, "event_date": None},
                {"id": 3, "title": "Garbled", "owner": "Sara", "is_shared": False, "event_date": "next tuesday"},
            ],
            "tasks": [
                {"id": 4, "title": "Ship", "owner": "Sara", "is_shared": False, "status": "تنفيذ",
                 "start_datetime": "soon", "due_datetime": "2024-01-02T10:00:00Z"},
            ],
        }
    )
    store = SupabaseStore(client)

    events = await store.list_events("Sara")
    tasks = await store.list_tasks("Sara", status=TaskStatus.IN_PROGRESS, field="due_at")

    assert [e.title for e in events] == ["Good"]
    assert tasks[0].start_at is None
    assert tasks[0].due_at == utc(2024, 1, 2, 10, 0)
