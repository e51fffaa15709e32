"""Tests for event classification."""

from __future__ import annotations

from dhr_notifier.engine.classifier import classify
from dhr_notifier.engine.events import EventType
from dhr_notifier.engine.ledger import DedupLedger
from dhr_notifier.provider.models import RawRecord


def _tx(record_id: str, status: str) -> RawRecord:
    return RawRecord(id=record_id, status=status)


def _pairs(events: list) -> list[tuple[EventType, str]]:
    return [(e.event_type, e.record.id) for e in events]


class TestClassify:
    def test_status_rules(self) -> None:
        transactions = [
            _tx("T1", "paid"),
            _tx("T2", "refunded"),
            _tx("T3", "chargeback"),
            _tx("T4", "pending"),
        ]
        withdrawals = [_tx("W1", "pending"), _tx("W2", "approved"), _tx("W3", "rejected")]
        events = classify(transactions, withdrawals, DedupLedger())
        assert _pairs(events) == [
            (EventType.SALE_PAID, "T1"),
            (EventType.REFUND, "T2"),
            (EventType.REFUND, "T3"),
            (EventType.WITHDRAWAL_REQUESTED, "W1"),
            (EventType.WITHDRAWAL_APPROVED, "W2"),
        ]

    def test_rule_order_then_provider_order(self) -> None:
        transactions = [_tx("T1", "refunded"), _tx("T2", "paid"), _tx("T3", "paid")]
        events = classify(transactions, [], DedupLedger())
        assert _pairs(events) == [
            (EventType.SALE_PAID, "T2"),
            (EventType.SALE_PAID, "T3"),
            (EventType.REFUND, "T1"),
        ]

    def test_skips_seen_identities(self) -> None:
        ledger = DedupLedger()
        ledger.add("transaction-T1-paid")
        events = classify([_tx("T1", "paid"), _tx("T2", "paid")], [], ledger)
        assert _pairs(events) == [(EventType.SALE_PAID, "T2")]

    def test_refund_after_paid_is_new(self) -> None:
        ledger = DedupLedger()
        ledger.add("transaction-T1-paid")
        events = classify([_tx("T1", "refunded")], [], ledger)
        assert _pairs(events) == [(EventType.REFUND, "T1")]

    def test_chargeback_after_refund_is_not_new(self) -> None:
        ledger = DedupLedger()
        ledger.add("transaction-T1-refunded")
        assert classify([_tx("T1", "chargeback")], [], ledger) == []

    def test_repeated_record_in_one_fetch(self) -> None:
        events = classify([_tx("T1", "paid"), _tx("T1", "paid")], [], DedupLedger())
        assert len(events) == 1

    def test_same_id_in_both_collections(self) -> None:
        events = classify([_tx("X", "paid")], [_tx("X", "pending")], DedupLedger())
        assert [e.identity.key for e in events] == ["transaction-X-paid", "withdrawal-X-requested"]

    def test_empty(self) -> None:
        assert classify([], [], DedupLedger()) == []

    def test_does_not_touch_ledger(self) -> None:
        ledger = DedupLedger()
        classify([_tx("T1", "paid")], [], ledger)
        assert len(ledger) == 0
