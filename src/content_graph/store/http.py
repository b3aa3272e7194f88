"""HTTP record store for the content REST backend.

Talks to ``{base_url}/entities/{collection}`` with an httpx ``AsyncClient``:

- GET    /entities/{name}?sort=-created_date        list
- GET    /entities/{name}?field=value&sort=...      find
- POST   /entities/{name}                           create
- PUT    /entities/{name}/{id}                      update
- DELETE /entities/{name}/{id}                      delete

Example:
    async with HttpRecordStore(StoreConfig.from_env()) as store:
        rows = await store.collection("word").list("-created_date")
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from content_graph.config import REQUEST_TIMEOUT_SECONDS
from content_graph.exceptions import ApiConfigError, StoreError
from content_graph.store.base import Record
from content_graph.utils.retry import store_retry

if TYPE_CHECKING:
    from types import TracebackType

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StoreConfig:
    """Connection settings for the REST backend.

    Attributes:
        base_url: Backend API root (e.g. https://api.example.com/v1).
        token: Bearer token, empty for anonymous access.
        timeout: Per-request timeout in seconds.
        user_agent: User-Agent header for requests.
    """

    base_url: str
    token: str = ""
    timeout: float = REQUEST_TIMEOUT_SECONDS
    user_agent: str = "content-graph/0.1.0"

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            msg = f"base_url must be an http(s) URL, got {self.base_url!r}"
            raise ValueError(msg)
        if self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout}"
            raise ValueError(msg)

    @classmethod
    def from_env(cls) -> StoreConfig:
        """Create configuration from environment variables.

        Reads CONTENT_API_URL (required) and CONTENT_API_TOKEN, loading a
        ``.env`` file first when one exists.

        Raises:
            ApiConfigError: If CONTENT_API_URL is not set.
        """
        from dotenv import load_dotenv

        load_dotenv()

        base_url = os.getenv("CONTENT_API_URL", "")
        if not base_url:
            raise ApiConfigError
        return cls(base_url=base_url.rstrip("/"), token=os.getenv("CONTENT_API_TOKEN", ""))


class HttpCollection:
    """One backend collection reached over HTTP."""

    def __init__(self, store: HttpRecordStore, name: str) -> None:
        self.name = name
        self._store = store
        self._path = f"/entities/{name}"

    async def list(self, sort: str | None = None) -> list[Record]:
        params = {"sort": sort} if sort else None
        data = await self._store.request(self.name, "list", "GET", self._path, params=params)
        return self._expect_rows(data, "list")

    async def find(self, filters: dict[str, Any], sort: str | None = None) -> list[Record]:
        params = {key: str(value) for key, value in filters.items()}
        if sort:
            params["sort"] = sort
        data = await self._store.request(self.name, "find", "GET", self._path, params=params)
        return self._expect_rows(data, "find")

    async def create(self, fields: dict[str, Any]) -> Record:
        data = await self._store.request(self.name, "create", "POST", self._path, json=fields)
        return self._expect_row(data, "create")

    async def update(self, record_id: str, fields: dict[str, Any]) -> Record:
        data = await self._store.request(
            self.name, "update", "PUT", f"{self._path}/{record_id}", json=fields
        )
        return self._expect_row(data, "update")

    async def delete(self, record_id: str) -> None:
        await self._store.request(self.name, "delete", "DELETE", f"{self._path}/{record_id}")

    def _expect_rows(self, data: Any, operation: str) -> list[Record]:
        if not isinstance(data, list):
            raise StoreError(self.name, operation, f"expected a list, got {type(data).__name__}")
        return data

    def _expect_row(self, data: Any, operation: str) -> Record:
        if not isinstance(data, dict):
            raise StoreError(self.name, operation, f"expected a record, got {type(data).__name__}")
        return data


class HttpRecordStore:
    """Record store backed by the content REST API.

    Features:
    - Bearer token authentication
    - Exponential backoff retry on transport errors and 5xx responses
    - Every failure surfaced as StoreError

    Example:
        async with HttpRecordStore(config) as store:
            edges = await store.collection("contentrelationship").find({"source_id": "12"})
    """

    def __init__(
        self,
        config: StoreConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HttpRecordStore.

        Args:
            config: Backend connection settings.
            transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        """
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._collections: dict[str, HttpCollection] = {}

    async def __aenter__(self) -> HttpRecordStore:
        """Initialize HTTP client on context entry."""
        headers = {"User-Agent": self._config.user_agent, "Accept": "application/json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close HTTP client on context exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def collection(self, name: str) -> HttpCollection:
        if name not in self._collections:
            self._collections[name] = HttpCollection(self, name)
        return self._collections[name]

    async def request(
        self,
        collection: str,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request, retrying transient failures.

        Returns:
            Decoded JSON body, or None for empty responses.

        Raises:
            RuntimeError: If the store is not used as an async context manager.
            StoreError: If the request still fails after retrying.
        """
        if not self._client:
            msg = "Record store not initialized. Use as async context manager."
            raise RuntimeError(msg)
        try:
            return await self._send(method, path, params=params, json=json)
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Store request rejected",
                collection=collection,
                operation=operation,
                status=e.response.status_code,
            )
            raise StoreError(collection, operation, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("Store request failed", collection=collection, operation=operation, error=str(e))
            raise StoreError(collection, operation, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise StoreError(collection, operation, f"invalid JSON response: {e}") from e

    @store_retry
    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        response = await self._client.request(method, path, params=params, json=json)  # type: ignore[union-attr]
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()
