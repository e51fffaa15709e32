"""Redis store backend.

Documents are stored as JSON strings under ``<redis_prefix>:<key>``.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from dhr_notifier.errors.notifier_errors import PersistenceError

if TYPE_CHECKING:
    from dhr_notifier.config.settings import StoreConfig


class RedisStore:
    """Redis-based document store using redis-py's asyncio client."""

    def __init__(self, config: StoreConfig) -> None:
        """Initialize Redis store.

        Args:
            config: Store configuration with the Redis URL and key prefix.
        """
        self._config = config
        self._redis = None

    async def connect(self) -> None:
        """Connect to Redis.

        Raises:
            PersistenceError: If Redis is unreachable.
        """
        from redis.asyncio import Redis
        from redis.exceptions import RedisError

        self._redis = Redis.from_url(
            self._config.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        try:
            await self._redis.ping()
        except RedisError as exc:
            msg = f"Failed to connect to Redis at {self._config.redis_url}"
            raise PersistenceError(msg) from exc

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    def _key(self, key: str) -> str:
        return f"{self._config.redis_prefix}:{key}"

    async def load(self, key: str) -> Any | None:
        """Fetch and decode the document under *key*."""
        from redis.exceptions import RedisError

        assert self._redis is not None
        try:
            raw = await self._redis.get(self._key(key))
        except RedisError as exc:
            msg = f"Cannot read {self._key(key)} from Redis: {exc}"
            raise PersistenceError(msg) from exc
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            msg = f"Corrupt document at {self._key(key)}: {exc}"
            raise PersistenceError(msg) from exc

    async def save(self, key: str, value: Any) -> None:
        """Encode and store *value* under *key*."""
        from redis.exceptions import RedisError

        assert self._redis is not None
        try:
            await self._redis.set(self._key(key), json.dumps(value, ensure_ascii=False))
        except (RedisError, TypeError, ValueError) as exc:
            msg = f"Cannot write {self._key(key)} to Redis: {exc}"
            raise PersistenceError(msg) from exc
