"""DHR payment provider: record models and async HTTP client."""

from __future__ import annotations

from dhr_notifier.provider.client import DHRClient
from dhr_notifier.provider.models import Customer, RawRecord, RecordKind

__all__ = ["Customer", "DHRClient", "RawRecord", "RecordKind"]
