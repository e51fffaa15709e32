"""Store client abstraction with file, memory and Redis backends."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from dhr_notifier.errors.notifier_errors import PersistenceError

if TYPE_CHECKING:
    from dhr_notifier.config.settings import StoreConfig

SUBSCRIPTIONS_KEY = "notifications"
LEDGER_KEY = "processed_events"


class StoreClient:
    """Document store that delegates to a file, memory or Redis backend."""

    def __init__(self, config: StoreConfig) -> None:
        """Initialize store client with configuration.

        Args:
            config: Store configuration with engine type and location.
        """
        self._config = config
        self._backend: StoreBackend | None = None
        self._engine = ""

    async def connect(self, engine: str | None = None) -> None:
        """Create and connect the configured backend.

        Args:
            engine: Backend to use instead of the configured one.

        Raises:
            ValueError: If the store engine type is invalid.
            PersistenceError: If the backend cannot be opened.
        """
        from dhr_notifier.storage.file import FileStore
        from dhr_notifier.storage.memory import MemoryStore
        from dhr_notifier.storage.redis import RedisStore

        engine = (engine or self._config.engine).lower()

        backend: StoreBackend
        if engine == "file":
            backend = FileStore(self._config)
        elif engine == "memory":
            backend = MemoryStore(self._config)
        elif engine == "redis":
            backend = RedisStore(self._config)
        else:
            msg = f"Unsupported store engine: {engine}"
            raise ValueError(msg)

        try:
            await backend.connect()
        except PersistenceError:
            await backend.close()
            raise
        self._backend = backend
        self._engine = engine

    async def close(self) -> None:
        """Close the backend (idempotent)."""
        if self._backend is not None:
            await self._backend.close()
            self._backend = None
            self._engine = ""

    @property
    def is_connected(self) -> bool:
        """Check if a backend is active."""
        return self._backend is not None

    @property
    def engine(self) -> str:
        """Name of the connected backend, empty when not connected."""
        return self._engine

    async def load(self, key: str) -> Any | None:
        """Load the document stored under *key*, or None if absent.

        Raises:
            PersistenceError: If the stored document is unreadable.
            RuntimeError: If not connected.
        """
        return await self._ensure_connected().load(key)

    async def save(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous document.

        Raises:
            PersistenceError: If the document cannot be written.
            RuntimeError: If not connected.
        """
        await self._ensure_connected().save(key, value)

    def _ensure_connected(self) -> StoreBackend:
        if self._backend is None:
            msg = "Store not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._backend


class StoreBackend(Protocol):
    """Protocol for store backend implementations."""

    async def connect(self) -> None:
        """Open the backend."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...

    async def load(self, key: str) -> Any | None:
        """Return the document under *key*, or None."""
        ...

    async def save(self, key: str, value: Any) -> None:
        """Replace the document under *key*."""
        ...
