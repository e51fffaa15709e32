"""Tests for event types and identities."""

from __future__ import annotations

import pytest

from dhr_notifier.engine.events import RULES, Event, EventIdentity, EventType
from dhr_notifier.provider.models import RawRecord, RecordKind


def _record(record_id: str = "abc", status: str = "paid") -> RawRecord:
    return RawRecord(id=record_id, status=status)


class TestEventType:
    @pytest.mark.parametrize(
        ("event_type", "kind"),
        [
            (EventType.SALE_PAID, RecordKind.TRANSACTION),
            (EventType.REFUND, RecordKind.TRANSACTION),
            (EventType.WITHDRAWAL_REQUESTED, RecordKind.WITHDRAWAL),
            (EventType.WITHDRAWAL_APPROVED, RecordKind.WITHDRAWAL),
        ],
    )
    def test_subject_kind(self, event_type: EventType, kind: RecordKind) -> None:
        assert event_type.subject_kind is kind

    def test_values(self) -> None:
        assert {e.value for e in EventType} == {
            "sale_paid",
            "refund",
            "withdrawal_requested",
            "withdrawal_approved",
        }

    def test_every_type_has_a_rule(self) -> None:
        assert {rule.event_type for rule in RULES} == set(EventType)


class TestEventIdentity:
    @pytest.mark.parametrize(
        ("event_type", "key"),
        [
            (EventType.SALE_PAID, "transaction-abc-paid"),
            (EventType.REFUND, "transaction-abc-refunded"),
            (EventType.WITHDRAWAL_REQUESTED, "withdrawal-abc-requested"),
            (EventType.WITHDRAWAL_APPROVED, "withdrawal-abc-approved"),
        ],
    )
    def test_key_format(self, event_type: EventType, key: str) -> None:
        identity = EventIdentity.for_record(event_type, _record())
        assert identity.key == key
        assert str(identity) == key

    def test_distinct_per_event_type(self) -> None:
        record = _record()
        paid = EventIdentity.for_record(EventType.SALE_PAID, record)
        refund = EventIdentity.for_record(EventType.REFUND, record)
        assert paid != refund
        assert paid.key != refund.key

    def test_hashable(self) -> None:
        a = EventIdentity.for_record(EventType.SALE_PAID, _record())
        b = EventIdentity.for_record(EventType.SALE_PAID, _record())
        assert {a, b} == {a}

    def test_event_identity(self) -> None:
        event = Event(EventType.WITHDRAWAL_APPROVED, _record("W9", "approved"))
        assert event.identity.key == "withdrawal-W9-approved"
