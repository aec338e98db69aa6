"""Clients for the hosted table store backing the listing pages."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

_LOGGER = logging.getLogger(__name__)

Row = Mapping[str, Any]

DEFAULT_REQUEST_TIMEOUT = 10.0


class RemoteFetchError(RuntimeError):
    """Raised when the remote store cannot return rows for a query."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RemoteStore(Protocol):
    """Anything that can return ordered rows for a table."""

    async def query(self, table: str, order_by: str, ascending: bool) -> list[Row]:
        ...


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, Mapping):
        for field in ("message", "error_description", "error", "hint"):
            value = payload.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()

    reason = response.reason_phrase or "error"
    return f"Remote store responded with {response.status_code} {reason}"


class SupabaseRestClient:
    """Query tables through the hosted PostgREST interface.

    A fresh ``httpx.AsyncClient`` is opened per query so that each call can run
    under whichever event loop the caller is using.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url.strip():
            raise ValueError("base_url must be provided")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def query(self, table: str, order_by: str, ascending: bool) -> list[Row]:
        params = {
            "select": "*",
            "order": f"{order_by}.{'asc' if ascending else 'desc'}",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers(),
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(f"/rest/v1/{table}", params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            _LOGGER.warning("Request for %s failed: %s", table, exc)
            raise RemoteFetchError(f"Failed to reach remote store: {exc}") from exc

        if response.is_error:
            raise RemoteFetchError(_error_message(response), status=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteFetchError("Remote store returned invalid JSON") from exc

        if not isinstance(payload, list):
            raise RemoteFetchError("Remote store response must be a JSON array")
        return payload


class UnconfiguredRemoteStore:
    """Placeholder used when no remote store URL has been configured."""

    async def query(self, table: str, order_by: str, ascending: bool) -> list[Row]:
        raise RemoteFetchError(
            "Remote data store is not configured; set FINCOMPARE_SUPABASE_URL"
        )


__all__ = [
    "DEFAULT_REQUEST_TIMEOUT",
    "RemoteFetchError",
    "RemoteStore",
    "Row",
    "SupabaseRestClient",
    "UnconfiguredRemoteStore",
]
