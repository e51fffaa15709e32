"""In-memory store backend, for tests and throwaway runs."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dhr_notifier.config.settings import StoreConfig


class MemoryStore:
    """Keeps documents in a dict; nothing survives a restart."""

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._documents: dict[str, Any] = {}

    async def connect(self) -> None:  # noqa: ASYNC910
        """Connect (no-op for in-memory)."""

    async def close(self) -> None:  # noqa: ASYNC910
        """Close and drop all documents."""
        self._documents.clear()

    async def load(self, key: str) -> Any | None:  # noqa: ASYNC910
        """Return a copy of the document under *key*."""
        if key not in self._documents:
            return None
        return copy.deepcopy(self._documents[key])

    async def save(self, key: str, value: Any) -> None:  # noqa: ASYNC910
        """Store a copy of *value* so later caller mutations don't leak in."""
        self._documents[key] = copy.deepcopy(value)
