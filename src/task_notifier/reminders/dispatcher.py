# src/task_notifier/reminders/dispatcher.py

from __future__ import annotations

"""
Notification dispatcher.

One call to NotificationDispatcher.run() is one scheduled run:
- loads subscribers with an active push subscription (mandatory),
- loads sharing changes of the last window (once per run),
- processes each subscriber as an independent asyncio task:
    * daily summaries (gated to the first minutes of a local hour),
    * time-window reminders for events and tasks,
    * sharing notices,
- delivers every composed message through the push transport.

Error policy:
- a failing subscriber query aborts the run (the caller reports it),
- a StoreError inside one contribution skips that contribution only,
- any other exception aborts the current subscriber only,
- SubscriptionGone clears the subscriber's handle; the remaining messages
  for that subscriber in this run are skipped,
- any other PushError is logged and counted.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from ..core.errors import PushError, StoreError, SubscriptionGone
from ..core.models import PushMessage, ReminderRule, SharingChange, Subscriber, TaskStatus
from ..core.ports import NotificationStore, PushTransport
from . import messages
from .clock import RunClock
from .engine import should_fire
from .rules import EVENT_RULES, IN_PROGRESS_TASK_RULES, PLANNING_TASK_RULES, max_lead

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class DispatcherConfig:
    window: timedelta = timedelta(minutes=5)
    tz_offset: timedelta = timedelta(hours=3)
    events_summary_hour: int = 7
    in_progress_summary_hour: int = 8
    overdue_summary_hour: int = 9
    summary_gate_minutes: int = 5
    max_concurrency: int = 4

    @classmethod
    def from_settings(cls, settings) -> DispatcherConfig:
        return cls(
            window=timedelta(minutes=settings.run_interval_minutes),
            tz_offset=timedelta(hours=settings.tz_offset_hours),
            events_summary_hour=settings.events_summary_hour,
            in_progress_summary_hour=settings.in_progress_summary_hour,
            overdue_summary_hour=settings.overdue_summary_hour,
            summary_gate_minutes=settings.summary_gate_minutes,
            max_concurrency=settings.max_concurrency,
        )


@dataclass(slots=True)
class SubscriberOutcome:
    name: str
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    expired: bool = False
    failed_contributions: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class RunReport:
    now: datetime
    outcomes: list[SubscriberOutcome] = field(default_factory=list)

    @property
    def sent(self) -> int:
        return sum(o.sent for o in self.outcomes)

    @property
    def failed(self) -> int:
        return sum(o.failed for o in self.outcomes)

    @property
    def skipped(self) -> int:
        return sum(o.skipped for o in self.outcomes)

    @property
    def expired(self) -> int:
        return sum(1 for o in self.outcomes if o.expired)

    @property
    def failed_subscribers(self) -> list[str]:
        return [o.name for o in self.outcomes if not o.ok]

    def summary(self) -> str:
        if not self.outcomes:
            return "No users with subscriptions."
        return (
            f"Notifications processed: subscribers={len(self.outcomes)} sent={self.sent} "
            f"failed={self.failed} skipped={self.skipped} expired={self.expired} "
            f"failed_subscribers={len(self.failed_subscribers)}"
        )


@dataclass(slots=True)
class _Delivery:
    """Per-subscriber delivery state for one run."""

    subscriber: Subscriber
    outcome: SubscriberOutcome
    gone: bool = False


Contribution = Callable[[Subscriber, RunClock], Awaitable[list[PushMessage]]]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class NotificationDispatcher:
    def __init__(
            self,
            store: NotificationStore,
            transport: PushTransport,
            config: DispatcherConfig | None = None,
            *,
            now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._transport = transport
        self._config = config or DispatcherConfig()
        self._now = now

        if self._config.window <= timedelta(0):
            raise ValueError("window must be positive")
        window_minutes = self._config.window // timedelta(minutes=1)
        if not 1 <= self._config.summary_gate_minutes <= window_minutes:
            # A gate wider than the run cadence lets two runs land in it.
            raise ValueError(
                f"summary_gate_minutes must be between 1 and the window ({window_minutes} min), "
                f"got {self._config.summary_gate_minutes}"
            )

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    async def run(self, now: datetime | None = None) -> RunReport:
        clock = RunClock(now=now or self._now(), offset=self._config.tz_offset)
        report = RunReport(now=clock.now)
        logger.info("Run started now=%s local=%s", clock.now.isoformat(), clock.local.isoformat())

        # Mandatory dataset: let StoreError propagate to the caller.
        subscribers = [s for s in await self._store.list_subscribers() if s.is_subscribed]
        if not subscribers:
            logger.info("No users with active subscriptions.")
            return report
        logger.info("Found %d subscriber(s).", len(subscribers))

        changes = await self._load_sharing_changes(clock)

        sem = asyncio.Semaphore(max(1, self._config.max_concurrency))

        async def _bounded(sub: Subscriber) -> SubscriberOutcome:
            async with sem:
                return await self._process_guarded(sub, clock, changes)

        report.outcomes = list(await asyncio.gather(*(_bounded(s) for s in subscribers)))
        logger.info("Run finished: %s", report.summary())
        return report

    async def _load_sharing_changes(self, clock: RunClock) -> list[SharingChange]:
        try:
            return await self._store.list_sharing_changes(
                after=clock.now - self._config.window,
                until=clock.now,
            )
        except StoreError:
            logger.exception("Sharing changes query failed; no sharing notices this run.")
            return []

    async def _process_guarded(
            self,
            subscriber: Subscriber,
            clock: RunClock,
            changes: list[SharingChange],
    ) -> SubscriberOutcome:
        outcome = SubscriberOutcome(name=subscriber.name)
        try:
            await self._process_subscriber(_Delivery(subscriber, outcome), clock, changes)
        except Exception as e:
            logger.exception("Processing failed for user=%s", subscriber.name)
            outcome.error = str(e) or type(e).__name__
        return outcome

    async def _process_subscriber(
            self,
            delivery: _Delivery,
            clock: RunClock,
            changes: list[SharingChange],
    ) -> None:
        subscriber = delivery.subscriber
        logger.debug("Processing notifications for user=%s", subscriber.name)

        contributions: list[tuple[str, Contribution]] = [
            ("events_summary", self._events_summary),
            ("in_progress_summary", self._in_progress_summary),
            ("overdue_summary", self._overdue_summary),
            ("event_reminders", self._event_reminders),
            ("planning_task_reminders", self._planning_task_reminders),
            ("in_progress_task_reminders", self._in_progress_task_reminders),
        ]

        for name, contribution in contributions:
            try:
                composed = await contribution(subscriber, clock)
            except StoreError:
                logger.exception("Query for %s failed user=%s; skipping.", name, subscriber.name)
                delivery.outcome.failed_contributions.append(name)
                continue

            for message in composed:
                await self._deliver(delivery, message)

        for change in changes:
            if change.owner == subscriber.name:
                continue
            await self._deliver(delivery, messages.sharing_notice(change))

    # ---- daily summaries ----

    async def _events_summary(self, subscriber: Subscriber, clock: RunClock) -> list[PushMessage]:
        if not clock.in_gate(self._config.events_summary_hour, self._config.summary_gate_minutes):
            return []
        start, end = clock.local_day_bounds()
        events = await self._store.list_events(subscriber.name, gte=start, lte=end)
        logger.info("Daily events summary user=%s count=%d", subscriber.name, len(events))
        return [messages.events_summary(events, clock)]

    async def _in_progress_summary(self, subscriber: Subscriber, clock: RunClock) -> list[PushMessage]:
        if not clock.in_gate(self._config.in_progress_summary_hour, self._config.summary_gate_minutes):
            return []
        tasks = await self._store.list_tasks(
            subscriber.name,
            status=TaskStatus.IN_PROGRESS,
            field="due_at",
            gte=clock.now,
        )
        logger.info("Daily in-progress summary user=%s count=%d", subscriber.name, len(tasks))
        return [messages.in_progress_summary(tasks)]

    async def _overdue_summary(self, subscriber: Subscriber, clock: RunClock) -> list[PushMessage]:
        if not clock.in_gate(self._config.overdue_summary_hour, self._config.summary_gate_minutes):
            return []
        tasks = await self._store.list_tasks(
            subscriber.name,
            status=TaskStatus.IN_PROGRESS,
            field="due_at",
            lt=clock.now,
        )
        logger.info("Daily overdue summary user=%s count=%d", subscriber.name, len(tasks))
        return [messages.overdue_summary(tasks)]

    # ---- point-in-time reminders ----

    def _horizon(self, clock: RunClock, rules: tuple[ReminderRule, ...]) -> tuple[datetime, datetime]:
        # A rule can only fire for targets in (now - window + lead, now + lead].
        return clock.now - self._config.window, clock.now + max_lead(rules)

    def _fired(self, target: datetime | None, clock: RunClock, rules: tuple[ReminderRule, ...]) -> list[ReminderRule]:
        if target is None:
            return []
        return [r for r in rules if should_fire(target, clock.now, r.lead, self._config.window)]

    async def _event_reminders(self, subscriber: Subscriber, clock: RunClock) -> list[PushMessage]:
        gte, lte = self._horizon(clock, EVENT_RULES)
        events = await self._store.list_events(subscriber.name, gte=gte, lte=lte)

        out: list[PushMessage] = []
        for event in events:
            for rule in self._fired(event.event_at, clock, EVENT_RULES):
                logger.info(
                    "Event reminder user=%s event=%r lead=%s",
                    subscriber.name,
                    event.title,
                    rule.lead,
                )
                out.append(rule.render(event.title))
        return out

    async def _planning_task_reminders(self, subscriber: Subscriber, clock: RunClock) -> list[PushMessage]:
        gte, lte = self._horizon(clock, PLANNING_TASK_RULES)
        tasks = await self._store.list_tasks(
            subscriber.name,
            status=TaskStatus.PLANNING,
            field="start_at",
            gte=gte,
            lte=lte,
        )

        out: list[PushMessage] = []
        for task in tasks:
            for rule in self._fired(task.start_at, clock, PLANNING_TASK_RULES):
                logger.info("Planning task reminder user=%s task=%r", subscriber.name, task.title)
                out.append(rule.render(task.title))
        return out

    async def _in_progress_task_reminders(self, subscriber: Subscriber, clock: RunClock) -> list[PushMessage]:
        gte, lte = self._horizon(clock, IN_PROGRESS_TASK_RULES)
        tasks = await self._store.list_tasks(
            subscriber.name,
            status=TaskStatus.IN_PROGRESS,
            field="due_at",
            gte=gte,
            lte=lte,
        )

        out: list[PushMessage] = []
        for task in tasks:
            for rule in self._fired(task.due_at, clock, IN_PROGRESS_TASK_RULES):
                logger.info("Deadline reminder user=%s task=%r", subscriber.name, task.title)
                out.append(rule.render(task.title))
        return out

    # ---- delivery ----

    async def _deliver(self, delivery: _Delivery, message: PushMessage) -> None:
        subscriber = delivery.subscriber
        outcome = delivery.outcome

        if delivery.gone or subscriber.push_subscription is None:
            logger.debug("Skipping %r for user=%s: subscription gone", message.title, subscriber.name)
            outcome.skipped += 1
            return

        try:
            await self._transport.send(subscriber.push_subscription, message.to_payload())
        except SubscriptionGone:
            logger.warning("Subscription expired for user=%s; removing it.", subscriber.name)
            delivery.gone = True
            outcome.expired = True
            outcome.failed += 1
            try:
                await self._store.clear_subscription(subscriber.name)
            except StoreError:
                logger.exception("Failed to remove expired subscription user=%s", subscriber.name)
            return
        except PushError:
            logger.exception("Push send failed user=%s title=%r", subscriber.name, message.title)
            outcome.failed += 1
            return

        outcome.sent += 1
        logger.info("Sent %r to user=%s", message.title, subscriber.name)
