"""Document storage for subscriptions and the dedup ledger.

Backends: ``file`` (JSON files), ``memory`` and ``redis``. All of them
store JSON-serialisable documents under a short key.
"""

from __future__ import annotations

from dhr_notifier.storage.client import StoreClient

__all__ = ["StoreClient"]
