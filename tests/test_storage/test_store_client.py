"""Tests for StoreClient backend selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from dhr_notifier.config.settings import StoreConfig, StoreEngine
from dhr_notifier.errors.notifier_errors import PersistenceError
from dhr_notifier.storage.client import StoreClient

if TYPE_CHECKING:
    from pathlib import Path


class TestStoreClient:
    async def test_memory_engine(self) -> None:
        client = StoreClient(StoreConfig(engine=StoreEngine.MEMORY))
        await client.connect()
        assert client.is_connected
        await client.save("k", {"a": 1})
        assert await client.load("k") == {"a": 1}
        await client.close()
        assert not client.is_connected

    async def test_file_engine(self, tmp_path: Path) -> None:
        client = StoreClient(StoreConfig(engine=StoreEngine.FILE, data_dir=str(tmp_path)))
        await client.connect()
        await client.save("k", ["x"])
        await client.close()
        assert (tmp_path / "k.json").exists()

    async def test_engine_override(self, tmp_path: Path) -> None:
        client = StoreClient(StoreConfig(engine=StoreEngine.FILE, data_dir=str(tmp_path)))
        await client.connect(StoreEngine.MEMORY)
        assert client.engine == "memory"
        await client.save("k", [1])
        await client.close()
        assert client.engine == ""
        assert not (tmp_path / "k.json").exists()

    async def test_unknown_engine(self) -> None:
        client = StoreClient(StoreConfig.model_construct(engine="sqlite"))
        with pytest.raises(ValueError, match="Unsupported store engine"):
            await client.connect()

    async def test_not_connected(self) -> None:
        client = StoreClient(StoreConfig(engine=StoreEngine.MEMORY))
        with pytest.raises(RuntimeError, match="not connected"):
            await client.load("k")

    async def test_close_is_idempotent(self) -> None:
        client = StoreClient(StoreConfig(engine=StoreEngine.MEMORY))
        await client.close()
        await client.connect()
        await client.close()
        await client.close()

    async def test_redis_unreachable(self) -> None:
        client = StoreClient(
            StoreConfig(engine=StoreEngine.REDIS, redis_url="redis://127.0.0.1:1/0")
        )
        with pytest.raises(PersistenceError, match="Failed to connect to Redis"):
            await client.connect()
        assert not client.is_connected
