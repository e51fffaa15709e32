"""Event types and identities.

An ``EventIdentity`` names one (subject, record, event type) pairing. Its
``key`` is the string stored in the dedup ledger and matches the format
written by earlier releases (``transaction-<id>-paid`` and friends), so an
existing ``processed_events.json`` keeps working.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dhr_notifier.provider.models import RecordKind

if TYPE_CHECKING:
    from dhr_notifier.provider.models import RawRecord


class EventType(enum.StrEnum):
    """Payment lifecycle events a subscription can listen to."""

    SALE_PAID = "sale_paid"
    REFUND = "refund"
    WITHDRAWAL_REQUESTED = "withdrawal_requested"
    WITHDRAWAL_APPROVED = "withdrawal_approved"

    @property
    def subject_kind(self) -> RecordKind:
        """The record collection this event type is detected in."""
        if self in (EventType.WITHDRAWAL_REQUESTED, EventType.WITHDRAWAL_APPROVED):
            return RecordKind.WITHDRAWAL
        return RecordKind.TRANSACTION


@dataclass(frozen=True)
class Rule:
    """Maps provider statuses of one record kind to an event type."""

    kind: RecordKind
    statuses: frozenset[str]
    event_type: EventType
    suffix: str


# Evaluated in this order; records keep provider order within each rule.
RULES: tuple[Rule, ...] = (
    Rule(RecordKind.TRANSACTION, frozenset({"paid"}), EventType.SALE_PAID, "paid"),
    Rule(
        RecordKind.TRANSACTION,
        frozenset({"refunded", "chargeback"}),
        EventType.REFUND,
        "refunded",
    ),
    Rule(
        RecordKind.WITHDRAWAL,
        frozenset({"pending"}),
        EventType.WITHDRAWAL_REQUESTED,
        "requested",
    ),
    Rule(
        RecordKind.WITHDRAWAL,
        frozenset({"approved"}),
        EventType.WITHDRAWAL_APPROVED,
        "approved",
    ),
)

_SUFFIXES = {rule.event_type: rule.suffix for rule in RULES}


@dataclass(frozen=True)
class EventIdentity:
    """Deduplication key for one detected event."""

    subject_kind: RecordKind
    record_id: str
    event_type: EventType

    @property
    def key(self) -> str:
        """Stable string form stored in the ledger."""
        return f"{self.subject_kind}-{self.record_id}-{_SUFFIXES[self.event_type]}"

    @classmethod
    def for_record(cls, event_type: EventType, record: RawRecord) -> EventIdentity:
        """Build the identity of *event_type* happening to *record*."""
        return cls(
            subject_kind=event_type.subject_kind,
            record_id=record.id,
            event_type=event_type,
        )

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class Event:
    """A newly detected event, ready for rendering and dispatch."""

    event_type: EventType
    record: RawRecord

    @property
    def identity(self) -> EventIdentity:
        """The ledger identity of this event."""
        return EventIdentity.for_record(self.event_type, self.record)
