"""Fixtures for the administrative API tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

from dhr_notifier.api.app import create_app
from dhr_notifier.engine.client import NotifierEngine

if TYPE_CHECKING:
    from collections.abc import Iterator

    from dhr_notifier.config.settings import AppConfig
    from tests.conftest import FakeProvider, WebhookSink


@pytest.fixture
def api_engine(app_config: AppConfig, provider: FakeProvider, sink: WebhookSink) -> NotifierEngine:
    """An engine the app lifespan initializes and closes."""
    return NotifierEngine(
        app_config,
        provider_transport=provider.transport,
        dispatch_transport=sink.transport,
    )


@pytest.fixture
def test_client(api_engine: NotifierEngine) -> Iterator[TestClient]:
    """Provide a TestClient with the lifespan running."""
    with TestClient(create_app(engine=api_engine)) as client:
        yield client


@pytest.fixture
def sale_payload() -> dict[str, object]:
    return {
        "name": "Vendas",
        "url": "https://hooks.test/vendas",
        "title": "{CLIENTE} pagou {VALOR}",
        "text": "Pedido {ID} via {METODO}",
        "eventType": "sale_paid",
    }
