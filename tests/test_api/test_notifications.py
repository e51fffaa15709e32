"""Tests for the /api/notifications and /api/test routes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

    from dhr_notifier.engine.client import NotifierEngine
    from tests.conftest import FakeProvider, WebhookSink


def _create(client: TestClient, payload: dict[str, object]) -> dict:
    response = client.post("/api/notifications", json=payload)
    assert response.status_code == 200, response.text
    return response.json()


class TestCreate:
    def test_create(self, test_client: TestClient, sale_payload: dict) -> None:
        created = _create(test_client, sale_payload)
        assert created["id"]
        assert created["eventType"] == "sale_paid"
        assert created["enabled"] is True
        assert created["title"] == sale_payload["title"]

    def test_create_disabled(self, test_client: TestClient, sale_payload: dict) -> None:
        created = _create(test_client, {**sale_payload, "enabled": False})
        assert created["enabled"] is False

    def test_missing_field(self, test_client: TestClient, sale_payload: dict) -> None:
        del sale_payload["url"]
        response = test_client.post("/api/notifications", json=sale_payload)
        assert response.status_code == 400
        assert response.json() == {
            "code": "missing-fields",
            "message": "Campos obrigatórios faltando",
            "error": "Campos obrigatórios faltando",
        }

    def test_empty_field(self, test_client: TestClient, sale_payload: dict) -> None:
        response = test_client.post("/api/notifications", json={**sale_payload, "title": ""})
        assert response.status_code == 400

    def test_unknown_event_type(self, test_client: TestClient, sale_payload: dict) -> None:
        response = test_client.post(
            "/api/notifications", json={**sale_payload, "eventType": "birthday"}
        )
        assert response.status_code == 422

    def test_updates_gauges(
        self, test_client: TestClient, api_engine: NotifierEngine, sale_payload: dict
    ) -> None:
        _create(test_client, sale_payload)
        _create(test_client, {**sale_payload, "enabled": False})
        reg = api_engine.metrics.registry
        assert reg.get_sample_value("dhr_notifier_subscriptions_total", {"state": "enabled"}) == 1
        assert reg.get_sample_value("dhr_notifier_subscriptions_total", {"state": "disabled"}) == 1


class TestListUpdateDelete:
    def test_list(self, test_client: TestClient, sale_payload: dict) -> None:
        assert test_client.get("/api/notifications").json() == []
        a = _create(test_client, sale_payload)
        b = _create(test_client, {**sale_payload, "name": "Reembolsos", "eventType": "refund"})
        listed = test_client.get("/api/notifications").json()
        assert [s["id"] for s in listed] == [a["id"], b["id"]]

    def test_update(self, test_client: TestClient, sale_payload: dict) -> None:
        created = _create(test_client, sale_payload)
        response = test_client.put(
            f"/api/notifications/{created['id']}",
            json={"title": "Nova venda {VALOR}", "enabled": False},
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["title"] == "Nova venda {VALOR}"
        assert updated["enabled"] is False
        assert updated["name"] == "Vendas"

    def test_update_event_type(self, test_client: TestClient, sale_payload: dict) -> None:
        created = _create(test_client, sale_payload)
        response = test_client.put(
            f"/api/notifications/{created['id']}", json={"eventType": "withdrawal_approved"}
        )
        assert response.json()["eventType"] == "withdrawal_approved"

    def test_update_unknown(self, test_client: TestClient) -> None:
        response = test_client.put("/api/notifications/nope", json={"name": "x"})
        assert response.status_code == 404
        assert response.json()["error"] == "Notificação não encontrada"

    def test_delete(self, test_client: TestClient, sale_payload: dict) -> None:
        created = _create(test_client, sale_payload)
        response = test_client.delete(f"/api/notifications/{created['id']}")
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert test_client.get("/api/notifications").json() == []
        assert test_client.delete(f"/api/notifications/{created['id']}").status_code == 404


class TestSendTest:
    def test_send(self, test_client: TestClient, sale_payload: dict, sink: WebhookSink) -> None:
        created = _create(test_client, sale_payload)
        response = test_client.post(f"/api/test/{created['id']}")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["title"] == "Cliente Teste pagou R$ 100.00"
        assert body["text"].startswith("Pedido TEST-")
        assert body["text"].endswith("via pix")
        assert len(sink.to("https://hooks.test/vendas")) == 1

    def test_send_failure(
        self, test_client: TestClient, sale_payload: dict, sink: WebhookSink
    ) -> None:
        sink.unreachable.add("https://hooks.test/vendas")
        created = _create(test_client, sale_payload)
        response = test_client.post(f"/api/test/{created['id']}")
        assert response.status_code == 200
        assert response.json()["success"] is False

    def test_send_unknown(self, test_client: TestClient) -> None:
        assert test_client.post("/api/test/nope").status_code == 404


class TestStatusCounts:
    def test_counts(
        self,
        test_client: TestClient,
        api_engine: NotifierEngine,
        provider: FakeProvider,
        sale_payload: dict,
    ) -> None:
        _create(test_client, sale_payload)
        _create(test_client, {**sale_payload, "enabled": False})
        provider.transactions = [{"id": "T1", "status": "paid", "amount": 100}]
        test_client.portal.call(api_engine.poller.tick)

        status = test_client.get("/api/status").json()
        assert status["processedCount"] == 1
        assert status["notificationsCount"] == 2
        assert status["activeNotifications"] == 1
