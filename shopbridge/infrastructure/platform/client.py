"""Thin GraphQL client for the platform Admin, Storefront and Customer APIs.

Requests go through ResilientClient. The client never raises for HTTP or
GraphQL failures: it returns a GraphQLResponse envelope, and a non-2xx or
non-JSON reply, or a request that never got a reply, is turned into an
``errors`` entry so the storage adapters classify it as a server error.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx

from shopbridge.infrastructure.http.fetcher import RequestOptions, ResilientClient
from shopbridge.shared.enums import ApiType

_AUTH_HEADERS: dict[ApiType, str] = {
    ApiType.ADMIN: "X-Shopify-Access-Token",
    ApiType.CUSTOMER: "Authorization",
    ApiType.STOREFRONT: "X-Shopify-Storefront-Access-Token",
}


@dataclass(frozen=True)
class GraphQLResponse:
    """Envelope returned by PlatformClient.request.

    ``status`` is 0 when no HTTP response was received.
    """

    data: dict[str, Any] | None = None
    errors: list[Any] = field(default_factory=list)
    status: int = 200

    @property
    def ok(self) -> bool:
        return not self.errors


def endpoint_url(shop: str, api_type: ApiType, api_version: str = "latest") -> str:
    """Return the GraphQL endpoint for a shop and API flavour."""
    if api_type is ApiType.ADMIN:
        return f"https://{shop}/admin/api/{api_version}/graphql.json"
    if api_type is ApiType.CUSTOMER:
        return f"https://shopify.com/{shop}/account/customer/api/{api_version}/graphql.json"
    return f"https://{shop}/api/{api_version}/graphql.json"


def auth_headers(api_type: ApiType, access_token: str) -> dict[str, str]:
    """Return the credential header for an API flavour."""
    value = f"Bearer {access_token}" if api_type is ApiType.CUSTOMER else access_token
    return {_AUTH_HEADERS[api_type]: value}


class PlatformClient:
    """POSTs GraphQL operations to one shop endpoint."""

    def __init__(
        self,
        shop: str,
        access_token: str,
        *,
        api_type: ApiType | str = ApiType.ADMIN,
        api_version: str = "latest",
        fetcher: ResilientClient | None = None,
    ) -> None:
        self._api_type = ApiType(api_type)
        self._url = endpoint_url(shop, self._api_type, api_version)
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            **auth_headers(self._api_type, access_token),
        }
        self._fetcher = fetcher if fetcher is not None else ResilientClient()

    @property
    def url(self) -> str:
        return self._url

    @property
    def fetcher(self) -> ResilientClient:
        return self._fetcher

    async def aclose(self) -> None:
        await self._fetcher.aclose()

    async def request(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> GraphQLResponse:
        """Execute a query or mutation and return its envelope."""
        body: dict[str, Any] = {"query": query}
        if variables is not None:
            body["variables"] = {k: v for k, v in variables.items() if v is not None}
        if operation_name:
            body["operationName"] = operation_name

        try:
            response = await self._fetcher.send(
                self._url,
                RequestOptions(method="POST", headers=self._headers, json=body),
            )
        except httpx.TransportError as e:
            return GraphQLResponse(
                data=None,
                errors=[{"message": f"{type(e).__name__}: {e}"}],
                status=0,
            )
        return _parse_envelope(response)


def _parse_envelope(response: httpx.Response) -> GraphQLResponse:
    status = response.status_code
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None

    if not response.is_success:
        message = f"HTTP {status} {response.reason_phrase}".strip()
        if isinstance(payload, dict) and payload.get("errors"):
            errors = payload["errors"]
            if not isinstance(errors, list):
                errors = [{"message": str(errors)}]
        else:
            errors = [{"message": message, "status": status}]
        return GraphQLResponse(data=None, errors=errors, status=status)

    if not isinstance(payload, dict):
        return GraphQLResponse(
            data=None,
            errors=[{"message": "Response is not a JSON object", "status": status}],
            status=status,
        )
    return GraphQLResponse(
        data=payload.get("data"),
        errors=list(payload.get("errors") or []),
        status=status,
    )


class gid:  # noqa: N801
    """Encode and decode platform global IDs (gid://shopify/<Type>/<id>)."""

    PREFIX = "gid://shopify/"

    @staticmethod
    def encode(owner_type: str, id_: str | int) -> str:
        return f"{gid.PREFIX}{owner_type}/{id_}"

    @staticmethod
    def decode(value: str) -> dict[str, str | None]:
        parts = value.split("/")
        return {
            "id": parts[-1] if parts else None,
            "owner_type": parts[-2] if len(parts) > 1 else None,
        }
