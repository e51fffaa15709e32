"""Shared test fixtures for the dhr-notifier test suite."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from dhr_notifier.config.settings import (
    AppConfig,
    PollerConfig,
    ProviderConfig,
    StoreConfig,
    StoreEngine,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from dhr_notifier.engine.client import NotifierEngine

API_URL = "https://dhr.test/v1"


# ---------------------------------------------------------------------------
# Fake HTTP peers
# ---------------------------------------------------------------------------


class FakeProvider:
    """Serves ``/transactions`` and ``/withdrawals`` from in-memory lists."""

    def __init__(self) -> None:
        self.transactions: list[dict[str, Any]] = []
        self.withdrawals: list[dict[str, Any]] = []
        self.fail: dict[str, int] = {}
        self.requests: list[httpx.Request] = []
        self.delay = 0.0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        kind = request.url.path.rsplit("/", 1)[-1]
        if kind in self.fail:
            return httpx.Response(self.fail[kind], text="provider error")
        page = int(request.url.params.get("page", "1"))
        size = int(request.url.params.get("pageSize", "50"))
        items = self.transactions if kind == "transactions" else self.withdrawals
        return httpx.Response(200, json={"data": items[(page - 1) * size : page * size]})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@dataclass
class Delivery:
    url: str
    body: dict[str, Any]


@dataclass
class WebhookSink:
    """Records webhook POSTs; URLs can be set to fail or be unreachable."""

    deliveries: list[Delivery] = field(default_factory=list)
    status: dict[str, int] = field(default_factory=dict)
    unreachable: set[str] = field(default_factory=set)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        self.deliveries.append(Delivery(url, json.loads(request.content)))
        return httpx.Response(self.status.get(url, 200), json={"ok": True})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def to(self, url: str) -> list[Delivery]:
        return [d for d in self.deliveries if d.url == url]


def transaction(record_id: str, status: str = "paid", amount: int = 5000, **extra: Any) -> dict:
    """Provider JSON for a transaction."""
    return {"id": record_id, "status": status, "amount": amount, **extra}


def withdrawal(record_id: str, status: str = "pending", amount: int = 20000) -> dict:
    """Provider JSON for a withdrawal."""
    return {"id": record_id, "status": status, "amount": amount}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def app_config() -> AppConfig:
    """Provide a test AppConfig: memory store, no background polling."""
    return AppConfig(
        provider=ProviderConfig(public_key="pk_test", secret_key="sk_test", api_url=API_URL),
        poller=PollerConfig(interval_seconds=5, enabled=False),
        store=StoreConfig(engine=StoreEngine.MEMORY),
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def sink() -> WebhookSink:
    return WebhookSink()


@pytest.fixture
async def engine(
    app_config: AppConfig, provider: FakeProvider, sink: WebhookSink
) -> AsyncIterator[NotifierEngine]:
    """Provide an initialized engine wired to the fake provider and sink."""
    from dhr_notifier.engine.client import NotifierEngine

    eng = NotifierEngine(
        app_config,
        provider_transport=provider.transport,
        dispatch_transport=sink.transport,
    )
    await eng.initialize()
    yield eng
    await eng.close()
