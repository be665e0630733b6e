# tests/conftest.py

from __future__ import annotations

import pytest

from task_notifier.core.models import Subscriber
from task_notifier.reminders.dispatcher import DispatcherConfig, NotificationDispatcher

from .fakes import FakePushTransport, FakeStore, subscription_for


@pytest.fixture()
def config() -> DispatcherConfig:
    """Defaults of the deployed job: 5-minute window, UTC+3, summaries at 7/8/9."""
    return DispatcherConfig()


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore(
        subscribers=[
            Subscriber(name="Sara", push_subscription=subscription_for("Sara")),
            Subscriber(name="Omar", push_subscription=subscription_for("Omar")),
            Subscriber(name="Lina", push_subscription=None),
        ]
    )


@pytest.fixture()
def transport() -> FakePushTransport:
    return FakePushTransport()


@pytest.fixture()
def dispatcher(store: FakeStore, transport: FakePushTransport, config: DispatcherConfig) -> NotificationDispatcher:
    """
    Dispatcher wired with in-memory fakes.

    Tests pass `now` to run() explicitly so every scenario is deterministic.
    """
    return NotificationDispatcher(store, transport, config)
