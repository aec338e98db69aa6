"""Unit tests for the hosted table store client."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from fincompare.backend.app.services.remote_store import (
    RemoteFetchError,
    SupabaseRestClient,
    UnconfiguredRemoteStore,
)


def _client(handler, api_key: str = "anon-key") -> SupabaseRestClient:
    return SupabaseRestClient(
        "https://project.supabase.test/",
        api_key,
        transport=httpx.MockTransport(handler),
    )


def test_query_requests_ordered_rows() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": 1}, {"id": 2}])

    rows = asyncio.run(_client(handler).query("fixed_deposits", "interest_rate", False))

    assert rows == [{"id": 1}, {"id": 2}]
    (request,) = seen
    assert request.url.path == "/rest/v1/fixed_deposits"
    assert request.url.params["select"] == "*"
    assert request.url.params["order"] == "interest_rate.desc"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["Authorization"] == "Bearer anon-key"


def test_query_uses_ascending_order_flag() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    asyncio.run(_client(handler).query("stock_brokers", "commission_rate", True))

    assert seen[0].url.params["order"] == "commission_rate.asc"


def test_query_without_key_sends_no_credentials() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    asyncio.run(_client(handler, api_key="").query("crypto_brokers", "trading_fee", True))

    assert "apikey" not in seen[0].headers
    assert "Authorization" not in seen[0].headers


def test_error_status_surfaces_remote_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404, json={"message": 'relation "public.fixed_deposits" does not exist'}
        )

    with pytest.raises(RemoteFetchError) as excinfo:
        asyncio.run(_client(handler).query("fixed_deposits", "interest_rate", False))

    assert excinfo.value.status == 404
    assert "does not exist" in str(excinfo.value)


def test_error_status_without_body_uses_reason_phrase() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="")

    with pytest.raises(RemoteFetchError, match="503 Service Unavailable"):
        asyncio.run(_client(handler).query("fixed_deposits", "interest_rate", False))


def test_non_array_payload_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"rows": []})

    with pytest.raises(RemoteFetchError, match="JSON array"):
        asyncio.run(_client(handler).query("fixed_deposits", "interest_rate", False))


def test_invalid_json_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    with pytest.raises(RemoteFetchError, match="invalid JSON"):
        asyncio.run(_client(handler).query("fixed_deposits", "interest_rate", False))


def test_transport_failures_are_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteFetchError, match="Failed to reach remote store"):
        asyncio.run(_client(handler).query("fixed_deposits", "interest_rate", False))


def test_base_url_is_required() -> None:
    with pytest.raises(ValueError):
        SupabaseRestClient("  ", "key")


def test_unconfigured_store_always_fails() -> None:
    with pytest.raises(RemoteFetchError, match="FINCOMPARE_SUPABASE_URL"):
        asyncio.run(UnconfiguredRemoteStore().query("fixed_deposits", "interest_rate", False))


def test_invalid_url_errors_are_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.InvalidURL("Invalid port: 'abc'")

    with pytest.raises(RemoteFetchError, match="Failed to reach remote store"):
        asyncio.run(_client(handler).query("fixed_deposits", "interest_rate", False))
