"""Tests for PlatformClient endpoint selection, auth headers and envelope parsing."""

import json

import httpx
import pytest

from shopbridge.infrastructure.http.fetcher import ResilientClient
from shopbridge.infrastructure.platform.client import (
    PlatformClient,
    auth_headers,
    endpoint_url,
    gid,
)
from shopbridge.shared.enums import ApiType


def _client(handler, sleep, **kwargs) -> PlatformClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = ResilientClient(http_client=http, sleep=sleep)
    return PlatformClient("test-shop.myshopify.com", "tok", fetcher=fetcher, **kwargs)


class TestEndpoints:
    def test_admin(self) -> None:
        assert (
            endpoint_url("s.myshopify.com", ApiType.ADMIN, "2025-01")
            == "https://s.myshopify.com/admin/api/2025-01/graphql.json"
        )

    def test_storefront(self) -> None:
        assert (
            endpoint_url("s.myshopify.com", ApiType.STOREFRONT)
            == "https://s.myshopify.com/api/latest/graphql.json"
        )

    def test_customer(self) -> None:
        assert (
            endpoint_url("12345", ApiType.CUSTOMER, "2025-01")
            == "https://shopify.com/12345/account/customer/api/2025-01/graphql.json"
        )

    def test_auth_headers(self) -> None:
        assert auth_headers(ApiType.ADMIN, "t") == {"X-Shopify-Access-Token": "t"}
        assert auth_headers(ApiType.STOREFRONT, "t") == {"X-Shopify-Storefront-Access-Token": "t"}
        assert auth_headers(ApiType.CUSTOMER, "t") == {"Authorization": "Bearer t"}


class TestGid:
    def test_encode(self) -> None:
        assert gid.encode("MediaImage", 42) == "gid://shopify/MediaImage/42"

    def test_decode(self) -> None:
        assert gid.decode("gid://shopify/GenericFile/7") == {
            "id": "7",
            "owner_type": "GenericFile",
        }


class TestRequest:
    @pytest.mark.asyncio
    async def test_posts_query_variables_and_operation(self, sleep) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {"shop": {"name": "Test"}}})

        client = _client(handler, sleep, api_version="2025-01")
        result = await client.request(
            "query Shop { shop { name } }", {"first": 1, "after": None}, "Shop"
        )

        assert result.ok
        assert result.data == {"shop": {"name": "Test"}}
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://test-shop.myshopify.com/admin/api/2025-01/graphql.json"
        assert request.headers["X-Shopify-Access-Token"] == "tok"
        body = json.loads(request.content)
        assert body["operationName"] == "Shop"
        assert body["variables"] == {"first": 1}

    @pytest.mark.asyncio
    async def test_graphql_errors_passed_through(self, sleep) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": None, "errors": [{"message": "Throttled"}]})

        result = await _client(handler, sleep).request("query { shop { name } }")
        assert not result.ok
        assert result.errors == [{"message": "Throttled"}]

    @pytest.mark.asyncio
    async def test_http_failure_becomes_envelope_error(self, sleep) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="Unauthorized")

        result = await _client(handler, sleep).request("query { shop { name } }")
        assert not result.ok
        assert result.status == 401
        assert result.errors[0]["status"] == 401

    @pytest.mark.asyncio
    async def test_non_json_body_becomes_envelope_error(self, sleep) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        result = await _client(handler, sleep).request("query { shop { name } }")
        assert not result.ok
        assert result.data is None

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_envelope_error(self, sleep) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _client(handler, sleep).request("query { shop { name } }")
        assert not result.ok
        assert result.status == 0
        assert result.data is None
        assert result.errors[0]["message"] == "ConnectError: connection refused"
