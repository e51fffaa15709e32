"""Event poller: one fetch, classify, dispatch and persist cycle.

``EventPoller.tick`` is the unit of work the task manager runs on every
interval. Ticks never overlap: a lock serialises callers, so a tick started
while another is running waits for it and then sees its ledger updates.

An event's identity is added to the ledger once delivery has been attempted
for every matching subscription, whatever the outcome. A failed delivery is
therefore not retried on the next tick.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dhr_notifier.engine.classifier import classify
from dhr_notifier.errors.notifier_errors import FetchError
from dhr_notifier.notifications.templates import format_amount
from dhr_notifier.provider.models import RecordKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dhr_notifier.engine.events import Event
    from dhr_notifier.engine.ledger import DedupLedger
    from dhr_notifier.metrics.collector import NotifierMetrics
    from dhr_notifier.notifications.dispatcher import DeliveryOutcome, WebhookDispatcher
    from dhr_notifier.notifications.subscriptions import Subscription, SubscriptionStore
    from dhr_notifier.provider.client import DHRClient
    from dhr_notifier.provider.models import RawRecord

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """Summary of one tick."""

    transactions: int = 0
    withdrawals: int = 0
    events: list[Event] = field(default_factory=list)
    deliveries: list[DeliveryOutcome] = field(default_factory=list)
    fetch_errors: list[str] = field(default_factory=list)

    @property
    def delivered(self) -> int:
        """Successful deliveries."""
        return sum(1 for d in self.deliveries if d.success)

    @property
    def failed(self) -> int:
        """Failed deliveries."""
        return sum(1 for d in self.deliveries if not d.success)


class EventPoller:
    """Runs ticks against the provider, ledger, subscriptions and dispatcher."""

    def __init__(
        self,
        provider: DHRClient,
        ledger: DedupLedger,
        subscriptions: SubscriptionStore,
        dispatcher: WebhookDispatcher,
        *,
        metrics: NotifierMetrics | None = None,
    ) -> None:
        self._provider = provider
        self._ledger = ledger
        self._subscriptions = subscriptions
        self._dispatcher = dispatcher
        self._metrics = metrics
        self._lock = asyncio.Lock()
        self._ticks = 0

    @property
    def ticks(self) -> int:
        """Number of completed ticks."""
        return self._ticks

    @property
    def is_ticking(self) -> bool:
        """Whether a tick is in progress."""
        return self._lock.locked()

    async def tick(self) -> TickReport:
        """Run one full cycle. Fetch failures yield no records for that kind."""
        async with self._lock:
            report = TickReport()
            transactions = await self._fetch(RecordKind.TRANSACTION, report)
            withdrawals = await self._fetch(RecordKind.WITHDRAWAL, report)
            report.transactions = len(transactions)
            report.withdrawals = len(withdrawals)

            events = classify(transactions, withdrawals, self._ledger)
            report.events = events

            if not events:
                logger.debug("No new events")

            # One snapshot for the whole dispatch phase
            snapshot = self._subscriptions.snapshot()
            for event in events:
                report.deliveries.extend(await self._process(event, snapshot))
                self._ledger.add(event.identity)

            await self._ledger.persist()
            self._ticks += 1
            if self._metrics:
                self._metrics.set_ledger_size(len(self._ledger))
            return report

    async def _fetch(self, kind: RecordKind, report: TickReport) -> list[RawRecord]:
        try:
            return await self._provider.fetch(kind)
        except FetchError as exc:
            logger.error("Error fetching %ss: %s", kind, exc.message)
            report.fetch_errors.append(exc.message)
            if self._metrics:
                self._metrics.record_fetch_failure(kind)
            return []

    async def _process(
        self, event: Event, snapshot: Sequence[Subscription]
    ) -> list[DeliveryOutcome]:
        record = event.record
        logger.info(
            "New event %s: id=%s amount=%s",
            event.event_type,
            record.id,
            format_amount(record.amount),
        )
        if self._metrics:
            self._metrics.record_event(event.event_type)

        targets = self._subscriptions.matching(event.event_type, snapshot)
        if not targets:
            logger.info("No notification configured for %s", event.event_type)
            return []

        outcomes = await self._dispatcher.notify(event, targets)
        if self._metrics:
            for outcome in outcomes:
                self._metrics.record_delivery(event.event_type, success=outcome.success)
        logger.info(
            "Event %s processed: %d delivered, %d failed",
            record.id,
            sum(1 for o in outcomes if o.success),
            sum(1 for o in outcomes if not o.success),
        )
        return outcomes
