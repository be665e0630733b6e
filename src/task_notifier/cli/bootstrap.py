# src/task_notifier/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- validates settings once,
- wires the concrete store and push transport into the dispatcher.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..core.ports import NotificationStore, PushTransport
from ..push.webpush_transport import WebPushTransport
from ..reminders.dispatcher import DispatcherConfig, NotificationDispatcher
from ..store.supabase_store import SupabaseStore

logger = logging.getLogger(__name__)


def create_dispatcher(
        *,
        settings: Settings | None = None,
        store: NotificationStore | None = None,
        transport: PushTransport | None = None,
) -> NotificationDispatcher:
    """
    Build a NotificationDispatcher from the provided settings.

    Keeping settings injectable makes the job easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings(). Missing credentials raise ConfigError
    only for the collaborators that actually have to be built.
    """
    if settings is None:
        settings = get_settings()

    if store is None or transport is None:
        settings.require_credentials()

    if store is None:
        store = SupabaseStore.from_settings(settings)
    if transport is None:
        transport = WebPushTransport.from_settings(settings)

    config = DispatcherConfig.from_settings(settings)
    logger.debug("Dispatcher config: %s", config)
    return NotificationDispatcher(store, transport, config)
