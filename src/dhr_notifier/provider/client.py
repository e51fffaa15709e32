"""DHR HTTP client: list transactions and withdrawals.

Provides an async HTTP client for the two DHR read endpoints polled by the
notifier:
- GET /transactions?page=N&pageSize=M
- GET /withdrawals?page=N&pageSize=M

Both are authenticated with HTTP Basic using the public/secret key pair.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from dhr_notifier.errors.notifier_errors import FetchError
from dhr_notifier.provider.models import RawRecord, RecordKind

if TYPE_CHECKING:
    from dhr_notifier.config.settings import ProviderConfig

logger = logging.getLogger(__name__)

_PATHS = {
    RecordKind.TRANSACTION: "/transactions",
    RecordKind.WITHDRAWAL: "/withdrawals",
}


class DHRClient:
    """Async HTTP client for the DHR payment API.

    Usage::

        dhr = DHRClient(config)
        await dhr.connect()
        try:
            transactions = await dhr.fetch_transactions()
        finally:
            await dhr.close()
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the DHR client.

        Args:
            config: Provider configuration (url, keys, paging, timeout).
            transport: Optional httpx transport, used by tests.
        """
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:  # noqa: ASYNC910
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._config.api_url.rstrip("/"),
            auth=httpx.BasicAuth(self._config.public_key, self._config.secret_key),
            headers={"Content-Type": "application/json"},
            timeout=self._config.timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_transactions(self) -> list[RawRecord]:
        """Return the most recent transactions, in provider order.

        Raises:
            FetchError: On transport errors or non-2xx responses.
        """
        return await self.fetch(RecordKind.TRANSACTION)

    async def fetch_withdrawals(self) -> list[RawRecord]:
        """Return the most recent withdrawals, in provider order.

        Raises:
            FetchError: On transport errors or non-2xx responses.
        """
        return await self.fetch(RecordKind.WITHDRAWAL)

    async def fetch(self, kind: RecordKind) -> list[RawRecord]:
        """Fetch up to ``max_pages`` pages of *kind* records.

        Paging stops early once a page comes back shorter than ``page_size``.
        Items that cannot be parsed are skipped. A failure on a later page
        is logged and the pages already fetched are returned.

        Raises:
            FetchError: If the first page cannot be fetched.
        """
        records: list[RawRecord] = []
        for page in range(1, self._config.max_pages + 1):
            try:
                items = await self._get_page(kind, page)
            except FetchError as exc:
                if page == 1:
                    raise
                logger.warning("Stopping %s paging at page %d: %s", kind, page, exc.message)
                break
            for item in items:
                if not isinstance(item, dict):
                    logger.warning("Skipping malformed %s item: %r", kind, item)
                    continue
                try:
                    records.append(RawRecord.from_dict(item))
                except ValueError as exc:
                    logger.warning("Skipping malformed %s: %s", kind, exc)
            if len(items) < self._config.page_size:
                break
        return records

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get_page(self, kind: RecordKind, page: int) -> list[Any]:
        client = self._ensure_connected()

        try:
            response = await client.get(
                _PATHS[kind],
                params={"page": page, "pageSize": self._config.page_size},
            )
        except httpx.HTTPError as exc:
            raise FetchError(f"DHR {kind} fetch failed: {exc}") from exc

        if not response.is_success:
            raise FetchError(
                f"DHR {kind} fetch failed: HTTP {response.status_code}: "
                f"{response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise FetchError(f"DHR {kind} fetch returned invalid JSON") from exc

        items = body.get("data") if isinstance(body, dict) else None
        return items if isinstance(items, list) else []

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Return the HTTP client, raising if not connected."""
        if self._client is None:
            msg = "DHR client not connected. Call connect() first."
            raise FetchError(msg, status_code=500)
        return self._client
