"""JSON file store backend.

Each key maps to ``<data_dir>/<key>.json``. Writes go to a temporary file in
the same directory which then replaces the target, so a crash mid-write
leaves the previous document intact.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dhr_notifier.errors.notifier_errors import PersistenceError

if TYPE_CHECKING:
    from dhr_notifier.config.settings import StoreConfig


class FileStore:
    """Stores each document as a pretty-printed JSON file."""

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._dir = Path(config.data_dir)

    async def connect(self) -> None:  # noqa: ASYNC910
        """Make sure the data directory exists."""
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Cannot create data directory {self._dir}: {exc}"
            raise PersistenceError(msg) from exc

    async def close(self) -> None:  # noqa: ASYNC910
        """Close (no-op for files)."""

    def path_for(self, key: str) -> Path:
        """Return the file backing *key*."""
        return self._dir / f"{key}.json"

    async def load(self, key: str) -> Any | None:  # noqa: ASYNC910
        """Read and decode ``<key>.json``; None when the file is missing."""
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            msg = f"Cannot read {path}: {exc}"
            raise PersistenceError(msg) from exc

    async def save(self, key: str, value: Any) -> None:  # noqa: ASYNC910
        """Encode *value* and atomically replace ``<key>.json``."""
        path = self.path_for(key)
        try:
            payload = json.dumps(value, indent=2, ensure_ascii=False)
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            msg = f"Cannot write {path}: {exc}"
            raise PersistenceError(msg) from exc
