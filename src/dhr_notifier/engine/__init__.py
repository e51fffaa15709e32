"""Event detection engine: classification, dedup ledger and polling."""

from __future__ import annotations

from dhr_notifier.engine.classifier import classify
from dhr_notifier.engine.events import Event, EventIdentity, EventType
from dhr_notifier.engine.ledger import DedupLedger
from dhr_notifier.engine.poller import EventPoller, TickReport

__all__ = [
    "DedupLedger",
    "Event",
    "EventIdentity",
    "EventPoller",
    "EventType",
    "TickReport",
    "classify",
]
