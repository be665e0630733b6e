# src/task_notifier/core/errors.py

from __future__ import annotations


class NotifierError(Exception):
    """Base class for errors raised by the notifier."""


class ConfigError(NotifierError):
    """Settings are missing or invalid; the run cannot start."""


class StoreError(NotifierError):
    """A query or update against the external store failed."""


class PushError(NotifierError):
    """A push delivery failed for a reason other than an expired subscription."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubscriptionGone(PushError):
    """The push service reported the subscription as expired or unsubscribed (HTTP 404/410)."""
