"""Webhook dispatch: one POST per subscriber per event.

Deliveries are never retried. Each (event, subscription) pair is attempted
independently, so one unreachable endpoint cannot hold back the others.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

import httpx

from dhr_notifier.errors.notifier_errors import DeliveryError
from dhr_notifier.notifications.templates import format_timestamp, render

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dhr_notifier.config.settings import DispatchConfig
    from dhr_notifier.engine.events import Event
    from dhr_notifier.notifications.subscriptions import Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of delivering one event to one subscription."""

    subscription_id: str
    subscription_name: str
    url: str
    title: str
    text: str
    success: bool
    error: str = ""


class WebhookDispatcher:
    """Renders subscription templates and POSTs them to webhook URLs.

    Usage::

        dispatcher = WebhookDispatcher(config)
        await dispatcher.start()
        outcomes = await dispatcher.notify(event, subscriptions)
        await dispatcher.stop()
    """

    def __init__(
        self,
        config: DispatchConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_running(self) -> bool:
        """Whether the HTTP client is open."""
        return self._client is not None

    async def start(self) -> None:  # noqa: ASYNC910
        """Open the shared HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                transport=self._transport,
            )

    async def stop(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def deliver(
        self,
        url: str,
        title: str,
        text: str,
        data: dict[str, Any] | None = None,
    ) -> bool:
        """POST one rendered notification to *url*.

        *data* is the record the notification was rendered from; it is not
        part of the payload.

        Returns:
            True on a 2xx answer, False otherwise (the failure is logged).
        """
        try:
            await self._send(url, title, text)
        except DeliveryError as exc:
            logger.warning("Delivery to %s failed: %s", url, exc.message)
            return False
        return True

    async def deliver_to(self, subscription: Subscription, event: Event) -> DeliveryOutcome:
        """Render *subscription*'s templates for *event* and deliver them."""
        title = render(subscription.title, event)
        text = render(subscription.text, event)
        logger.info("Sending %s to %s", event.event_type, subscription.name)
        try:
            await self._send(subscription.url, title, text)
        except DeliveryError as exc:
            logger.warning(
                "Delivery of %s to %s (%s) failed: %s",
                event.identity,
                subscription.name,
                subscription.url,
                exc.message,
            )
            return DeliveryOutcome(
                subscription.id,
                subscription.name,
                subscription.url,
                title,
                text,
                success=False,
                error=exc.message,
            )
        logger.info("Delivered %s to %s", event.identity, subscription.name)
        return DeliveryOutcome(
            subscription.id, subscription.name, subscription.url, title, text, success=True
        )

    async def notify(
        self, event: Event, subscriptions: Sequence[Subscription]
    ) -> list[DeliveryOutcome]:
        """Deliver *event* to every subscription concurrently.

        Outcomes are returned in subscription order. An unexpected error in
        one delivery is logged and reported as a failure for that pair only.
        """
        results = await asyncio.gather(
            *(self.deliver_to(sub, event) for sub in subscriptions),
            return_exceptions=True,
        )
        outcomes: list[DeliveryOutcome] = []
        for sub, result in zip(subscriptions, results, strict=True):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error(
                    "Unexpected error delivering %s to %s",
                    event.identity,
                    sub.name,
                    exc_info=result,
                )
                outcomes.append(
                    DeliveryOutcome(
                        sub.id, sub.name, sub.url, "", "", success=False, error=str(result)
                    )
                )
            else:
                outcomes.append(result)
        return outcomes

    async def _send(self, url: str, title: str, text: str) -> None:
        """POST the notification payload; raise ``DeliveryError`` on failure."""
        if self._client is None:
            msg = "Dispatcher not started. Call start() first."
            raise DeliveryError(msg, status_code=500)

        payload = {
            "title": title,
            "text": text,
            "input": {"data": format_timestamp(datetime.now())},
        }
        try:
            response = await self._client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise DeliveryError(f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise DeliveryError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )
