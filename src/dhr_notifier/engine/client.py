"""NotifierEngine: central engine owning all state and services."""

from __future__ import annotations

import logging
import time
from functools import partial
from typing import TYPE_CHECKING

from dhr_notifier.config.settings import StoreEngine
from dhr_notifier.engine.events import Event, EventType
from dhr_notifier.engine.ledger import DedupLedger
from dhr_notifier.engine.poller import EventPoller
from dhr_notifier.errors.notifier_errors import PersistenceError
from dhr_notifier.metrics.collector import NotifierMetrics
from dhr_notifier.notifications.dispatcher import DeliveryOutcome, WebhookDispatcher
from dhr_notifier.notifications.subscriptions import SubscriptionStore
from dhr_notifier.provider.client import DHRClient
from dhr_notifier.provider.models import RawRecord
from dhr_notifier.storage.client import StoreClient
from dhr_notifier.taskmanager.manager import CronJob, TaskManager
from dhr_notifier.taskmanager.tasks import CHECK_EVENTS_JOB, task_check_events

if TYPE_CHECKING:
    import httpx

    from dhr_notifier.config.settings import AppConfig
    from dhr_notifier.notifications.subscriptions import Subscription

logger = logging.getLogger(__name__)

_ERR_NOT_INITIALIZED = "Engine not initialized. Call initialize() first."


def sample_record() -> RawRecord:
    """Synthetic transaction used by test deliveries."""
    return RawRecord.from_dict(
        {
            "id": f"TEST-{int(time.time() * 1000)}",
            "status": "paid",
            "amount": 10000,
            "customer": {
                "name": "Cliente Teste",
                "email": "teste@email.com",
                "document": "123.456.789-00",
            },
            "paymentMethod": "pix",
            "installments": 1,
        }
    )


class NotifierEngine:
    """Owns the store, ledger, subscriptions, provider client and dispatcher.

    The ledger is written only by the poller. Subscriptions are written only
    through ``subscriptions`` (the admin API) and read by the poller as
    snapshots.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        provider_transport: httpx.AsyncBaseTransport | None = None,
        dispatch_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize engine with configuration.

        Args:
            config: Application configuration.
            provider_transport: Optional httpx transport for the DHR client.
            dispatch_transport: Optional httpx transport for webhook delivery.
        """
        self._config = config
        self._initialized = False

        self._metrics = NotifierMetrics()
        self._store = StoreClient(config.store)
        self._ledger = DedupLedger(self._store)
        self._subscriptions = SubscriptionStore(self._store)
        self._provider = DHRClient(config.provider, transport=provider_transport)
        self._dispatcher = WebhookDispatcher(config.dispatch, transport=dispatch_transport)
        self._poller = EventPoller(
            self._provider,
            self._ledger,
            self._subscriptions,
            self._dispatcher,
            metrics=self._metrics,
        )
        self._task_manager: TaskManager | None = None

    async def initialize(self) -> None:
        """Load persisted state, open HTTP clients and start polling.

        An unavailable store is not fatal: state is then kept in memory
        only. If any later step fails, whatever was already opened is
        released before the error propagates.

        Raises:
            RuntimeError: If already initialized.
            ConfigError: If the provider credentials are missing.
        """
        if self._initialized:
            msg = "Engine already initialized"
            raise RuntimeError(msg)

        self._config.require_credentials()

        try:
            await self._connect_store()
            await self._ledger.load()
            await self._subscriptions.load()
            await self._provider.connect()
            await self._dispatcher.start()
            self._metrics.set_ledger_size(len(self._ledger))
            self.refresh_subscription_metrics()

            if self._config.poller.enabled:
                self._task_manager = TaskManager(metrics=self._metrics)
                self._task_manager.register(
                    CHECK_EVENTS_JOB,
                    CronJob(
                        handler=partial(task_check_events, self),
                        period=self._config.poller.interval_seconds,
                        run_immediately=True,
                    ),
                )
                await self._task_manager.start()
        except BaseException:
            logger.error("Notifier startup failed, releasing resources")
            await self._release()
            raise

        self._initialized = True
        logger.info(
            "Notifier started: interval=%ss, store=%s, notifications=%d, processed events=%d",
            self._config.poller.interval_seconds,
            self._store.engine,
            len(self._subscriptions),
            len(self._ledger),
        )

    async def close(self) -> None:
        """Stop polling and release connections.

        Can be called multiple times (idempotent).
        """
        if not self._initialized:
            return

        if self._task_manager is not None:
            await self._task_manager.stop()
            self._task_manager = None

        await self._ledger.persist()
        await self._release()
        self._initialized = False

    async def _connect_store(self) -> None:
        try:
            await self._store.connect()
        except PersistenceError as exc:
            logger.error(
                "Store %r unavailable, keeping state in memory only: %s",
                str(self._config.store.engine),
                exc.message,
            )
            await self._store.connect(StoreEngine.MEMORY)

    async def _release(self) -> None:
        if self._task_manager is not None:
            await self._task_manager.stop()
            self._task_manager = None
        await self._dispatcher.stop()
        await self._provider.close()
        await self._store.close()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        """Whether ``initialize()`` has completed."""
        return self._initialized

    @property
    def config(self) -> AppConfig:
        """The application configuration."""
        return self._config

    @property
    def metrics(self) -> NotifierMetrics:
        """Prometheus metrics for this engine."""
        return self._metrics

    @property
    def store(self) -> StoreClient:
        """The document store (memory-only if the configured one failed)."""
        return self._store

    @property
    def provider(self) -> DHRClient:
        """The DHR API client."""
        return self._provider

    @property
    def ledger(self) -> DedupLedger:
        """The dedup ledger (read-only outside the poller)."""
        return self._ledger

    @property
    def subscriptions(self) -> SubscriptionStore:
        """The subscription store."""
        return self._subscriptions

    @property
    def dispatcher(self) -> WebhookDispatcher:
        """The webhook dispatcher."""
        return self._dispatcher

    @property
    def poller(self) -> EventPoller:
        """The event poller."""
        return self._poller

    @property
    def is_polling(self) -> bool:
        """Whether the poll loop is scheduled."""
        return self._task_manager is not None and self._task_manager.is_running

    # ------------------------------------------------------------------
    # Operations used by the admin API
    # ------------------------------------------------------------------

    async def send_test(self, subscription: Subscription) -> DeliveryOutcome:
        """Deliver *subscription*'s templates rendered with sample data."""
        self._ensure_initialized()
        event = Event(_event_type_for(subscription.event_type), sample_record())
        return await self._dispatcher.deliver_to(subscription, event)

    def refresh_subscription_metrics(self) -> None:
        """Push current subscription counts to the gauges."""
        active = self._subscriptions.active_count
        self._metrics.set_subscription_counts(
            enabled=active,
            disabled=len(self._subscriptions) - active,
        )

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(_ERR_NOT_INITIALIZED)


def _event_type_for(value: str) -> EventType:
    """Parse a stored event type; unknown values render as a sale."""
    try:
        return EventType(value)
    except ValueError:
        return EventType.SALE_PAID
