"""Notification subscriptions and their store.

The store owns the subscription list. The admin API mutates it through the
async CRUD methods, which are serialised by a lock; the poll loop only reads
immutable snapshots, so a tick never observes a half-applied change.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import asdict, dataclass, replace
from typing import TYPE_CHECKING, Any

from dhr_notifier.errors.notifier_errors import PersistenceError
from dhr_notifier.storage.client import SUBSCRIPTIONS_KEY

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dhr_notifier.storage.client import StoreClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Subscription:
    """A webhook target listening for one event type."""

    id: str
    name: str
    url: str
    title: str
    text: str
    event_type: str
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored / API form (``eventType`` key)."""
        data = asdict(self)
        data["eventType"] = data.pop("event_type")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subscription:
        """Create from the stored / API form.

        Raises:
            ValueError: If a required field is missing.
        """
        try:
            return cls(
                id=str(data["id"]),
                name=data["name"],
                url=data["url"],
                title=data["title"],
                text=data["text"],
                event_type=data.get("eventType", data.get("event_type")) or "",
                enabled=bool(data.get("enabled", True)),
            )
        except KeyError as exc:
            msg = f"subscription missing field {exc}"
            raise ValueError(msg) from exc


class SubscriptionStore:
    """In-memory subscription list with best-effort persistence."""

    def __init__(self, store: StoreClient | None = None) -> None:
        self._store = store
        self._items: tuple[Subscription, ...] = ()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> tuple[Subscription, ...]:
        """Immutable view of the current list."""
        return self._items

    def get_all(self) -> list[Subscription]:
        """All subscriptions, in creation order."""
        return list(self._items)

    def get(self, subscription_id: str) -> Subscription | None:
        """Return the subscription with *subscription_id*, if any."""
        for sub in self._items:
            if sub.id == subscription_id:
                return sub
        return None

    def matching(
        self, event_type: str, snapshot: Sequence[Subscription] | None = None
    ) -> list[Subscription]:
        """Enabled subscriptions for *event_type*, from *snapshot* or the current list."""
        items = self.snapshot() if snapshot is None else snapshot
        return [sub for sub in items if sub.enabled and sub.event_type == event_type]

    @property
    def active_count(self) -> int:
        """Number of enabled subscriptions."""
        return sum(1 for sub in self._items if sub.enabled)

    async def load(self) -> None:
        """Replace the list with the stored one; empty if unreadable."""
        if self._store is None:
            return
        try:
            data = await self._store.load(SUBSCRIPTIONS_KEY)
        except PersistenceError as exc:
            logger.error("Could not load notifications, starting empty: %s", exc.message)
            data = None

        items: list[Subscription] = []
        for entry in data if isinstance(data, list) else []:
            if not isinstance(entry, dict):
                logger.warning("Skipping malformed notification entry: %r", entry)
                continue
            try:
                items.append(Subscription.from_dict(entry))
            except ValueError as exc:
                logger.warning("Skipping malformed notification entry: %s", exc)
        self._items = tuple(items)
        logger.info("Loaded %d notifications", len(self._items))

    async def create(
        self,
        *,
        name: str,
        url: str,
        title: str,
        text: str,
        event_type: str,
        enabled: bool = True,
    ) -> Subscription:
        """Add a subscription with a freshly generated id."""
        sub = Subscription(
            id=uuid.uuid4().hex,
            name=name,
            url=url,
            title=title,
            text=text,
            event_type=event_type,
            enabled=enabled,
        )
        async with self._lock:
            self._items = (*self._items, sub)
            await self._persist()
        return sub

    async def update(self, subscription_id: str, **changes: Any) -> Subscription | None:
        """Apply *changes* to a subscription; None if it doesn't exist.

        Empty or missing text fields keep their current value; ``enabled``
        is applied whenever it is not None.
        """
        async with self._lock:
            current = self.get(subscription_id)
            if current is None:
                return None
            fields: dict[str, Any] = {
                key: value
                for key in ("name", "url", "title", "text", "event_type")
                if (value := changes.get(key))
            }
            if changes.get("enabled") is not None:
                fields["enabled"] = bool(changes["enabled"])
            updated = replace(current, **fields)
            self._items = tuple(updated if sub.id == subscription_id else sub for sub in self._items)
            await self._persist()
        return updated

    async def delete(self, subscription_id: str) -> bool:
        """Remove a subscription; False if it doesn't exist."""
        async with self._lock:
            remaining = tuple(sub for sub in self._items if sub.id != subscription_id)
            if len(remaining) == len(self._items):
                return False
            self._items = remaining
            await self._persist()
        return True

    async def _persist(self) -> None:
        if self._store is None:
            return
        try:
            await self._store.save(SUBSCRIPTIONS_KEY, [sub.to_dict() for sub in self._items])
        except PersistenceError as exc:
            logger.error("Could not save notifications: %s", exc.message)
