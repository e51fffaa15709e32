"""Event classifier: turns fetched records into new events.

Pure function over the fetched lists and a read-only view of the ledger.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from dhr_notifier.engine.events import RULES, Event, EventIdentity
from dhr_notifier.provider.models import RecordKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dhr_notifier.provider.models import RawRecord


class SeenEvents(Protocol):
    """Read-only ledger lookup used during classification."""

    def contains(self, key: str) -> bool:
        """Whether *key* was already processed."""
        ...


def classify(
    transactions: Sequence[RawRecord],
    withdrawals: Sequence[RawRecord],
    ledger: SeenEvents,
) -> list[Event]:
    """Return the events in this fetch that the ledger has not seen.

    Rule groups are applied in ``RULES`` order and records keep the order the
    provider returned them in. A record repeated within the same fetch yields
    one event. Records matching no rule are skipped.
    """
    records = {
        RecordKind.TRANSACTION: transactions,
        RecordKind.WITHDRAWAL: withdrawals,
    }
    emitted: set[str] = set()
    events: list[Event] = []

    for rule in RULES:
        for record in records[rule.kind]:
            if record.status not in rule.statuses:
                continue
            key = EventIdentity.for_record(rule.event_type, record).key
            if key in emitted or ledger.contains(key):
                continue
            emitted.add(key)
            events.append(Event(rule.event_type, record))

    return events
