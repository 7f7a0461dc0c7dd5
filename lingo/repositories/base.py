"""
Base Repository.

Base class for repositories over the hosted row store's REST interface
(PostgREST). Repositories raise transport exceptions (httpx.HTTPError);
services translate them into application errors.
"""

from collections.abc import Callable
from typing import Any

import httpx

from lingo.core.config import get_settings, get_store_base_url
from lingo.core.exceptions import WriteError
from lingo.core.logging import get_logger, log_with_source
from lingo.core.resilience import transient_retry

logger = get_logger(__name__)

TokenProvider = Callable[[], str | None]


def create_store_client(
    base_url: str | None = None,
    api_key: str | None = None,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create the HTTP client for the store's REST endpoint.

    Args:
        base_url: Project URL. Defaults to store.yaml.
        api_key: Anonymous API key. Defaults to config/.env.
        timeout: Request timeout in seconds. Defaults to application.yaml.
        transport: Optional transport (tests use httpx.MockTransport)

    Returns:
        httpx.AsyncClient rooted at <project>/rest/v1
    """
    if base_url is None or timeout is None:
        config_url, config_timeout = get_store_base_url()
        base_url = base_url or config_url
        timeout = timeout if timeout is not None else config_timeout
    if api_key is None:
        api_key = get_settings().supabase_anon_key

    return httpx.AsyncClient(
        base_url=f"{base_url.rstrip('/')}/rest/v1",
        timeout=timeout,
        headers={"apikey": api_key, "Content-Type": "application/json"},
        transport=transport,
    )


class BaseRepository:
    """
    Base repository with common CRUD operations over one table.

    Subclasses set the table name:

        class NoteRepository(BaseRepository):
            table = "notes"

    Filters use PostgREST syntax, e.g. {"user_id": "eq.<id>"}.
    """

    table: str

    def __init__(
        self,
        client: httpx.AsyncClient,
        token_provider: TokenProvider | None = None,
        max_attempts: int = 3,
        backoff_multiplier: float = 0.5,
        backoff_max: float = 4.0,
        table: str | None = None,
    ) -> None:
        self.client = client
        if table is not None:
            self.table = table
        self._token_provider = token_provider
        self._max_attempts = max_attempts
        self._backoff_multiplier = backoff_multiplier
        self._backoff_max = backoff_max

    @property
    def path(self) -> str:
        return f"/{self.table}"

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        token = token or self.client.headers.get("apikey", "")
        return {"Authorization": f"Bearer {token}"}

    async def _send(self, method: str, **kwargs: Any) -> httpx.Response:
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        response = await self.client.request(method, self.path, headers=headers, **kwargs)
        log_with_source(
            logger,
            "store",
            "debug",
            "Store request",
            method=method,
            table=self.table,
            status=response.status_code,
        )
        response.raise_for_status()
        return response

    async def select(
        self,
        filters: dict[str, str] | None = None,
        order: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Select all matching rows.

        Reads are retried on transport errors (connection resets, timeouts).
        """
        params = {"select": "*", **(filters or {})}
        if order:
            params["order"] = order

        async for attempt in transient_retry(
            max_attempts=self._max_attempts,
            multiplier=self._backoff_multiplier,
            max_wait=self._backoff_max,
            retry_on=(httpx.TransportError,),
        ):
            with attempt:
                response = await self._send("GET", params=params)
        return response.json() or []

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored (server defaults applied)."""
        response = await self._send(
            "POST",
            json=values,
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if not rows:
            raise WriteError(f"Insert into {self.table} returned no row")
        return rows[0]

    async def update(self, filters: dict[str, str], values: dict[str, Any]) -> None:
        """Update matching rows."""
        await self._send("PATCH", params=filters, json=values)

    async def delete(self, filters: dict[str, str]) -> None:
        """Delete matching rows."""
        await self._send("DELETE", params=filters)


def describe_store_error(exc: BaseException) -> str:
    """Extract a human-readable message from a store failure."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("msg") or body.get("error_description")
            if message:
                return str(message)
        return f"Store responded with HTTP {exc.response.status_code}"
    return str(exc) or exc.__class__.__name__
