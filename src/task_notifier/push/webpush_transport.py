# src/task_notifier/push/webpush_transport.py

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pywebpush import WebPushException, webpush

from ..core.errors import ConfigError, PushError, SubscriptionGone

logger = logging.getLogger(__name__)

# Push services answer 404/410 once the browser dropped the subscription.
GONE_STATUS_CODES = frozenset({404, 410})


def _status_code(exc: WebPushException) -> int | None:
    response = getattr(exc, "response", None)
    if response is None:
        return None
    return getattr(response, "status_code", None)


class WebPushTransport:
    """PushTransport over the Web Push protocol with VAPID authentication (pywebpush)."""

    def __init__(
            self,
            *,
            vapid_private_key: str,
            vapid_subject: str,
            ttl_seconds: int = 24 * 60 * 60,
            timeout_seconds: float = 10.0,
    ) -> None:
        if not vapid_private_key:
            raise ConfigError("VAPID private key is required")
        self._vapid_private_key = vapid_private_key
        self._vapid_subject = vapid_subject
        self._ttl = int(ttl_seconds)
        self._timeout = float(timeout_seconds)

    @classmethod
    def from_settings(cls, settings) -> WebPushTransport:
        return cls(
            vapid_private_key=settings.vapid_private_key,
            vapid_subject=settings.vapid_subject,
            ttl_seconds=settings.push_ttl_seconds,
        )

    def _send_sync(self, subscription: dict[str, Any], payload: str) -> None:
        try:
            webpush(
                subscription_info=subscription,
                data=payload,
                vapid_private_key=self._vapid_private_key,
                # webpush() adds "aud"/"exp" to the claims dict; never share it between calls.
                vapid_claims={"sub": self._vapid_subject},
                ttl=self._ttl,
                timeout=self._timeout,
            )
        except WebPushException as e:
            status = _status_code(e)
            if status in GONE_STATUS_CODES:
                raise SubscriptionGone(f"Subscription gone (HTTP {status})", status_code=status) from e
            raise PushError(f"Web push failed: {e}", status_code=status) from e
        except Exception as e:
            raise PushError(f"Web push failed: {e}") from e

    async def send(self, subscription: dict[str, Any], payload: str) -> None:
        if not subscription or "endpoint" not in subscription:
            raise PushError("Subscription has no endpoint")

        logger.debug("Sending push endpoint=%s...", str(subscription["endpoint"])[:48])
        await asyncio.to_thread(self._send_sync, subscription, payload)
