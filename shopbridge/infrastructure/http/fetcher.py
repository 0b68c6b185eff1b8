"""Outbound HTTP with merged per-call options, rate-limit waits and bounded retry.

Every call to the platform (GraphQL requests, direct uploads, downloads of
locator URLs) goes through ResilientClient. It never raises for HTTP
status codes: the response, or the last response obtained while retrying,
is returned and callers classify it.

All HTTP calls use httpx.AsyncClient so they do not block the event loop.
Backoff sleeps are plain awaits, so task cancellation and
asyncio.timeout() around a call interrupt them.
"""

from __future__ import annotations

import asyncio
import math
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import Any

import httpx

from shopbridge.shared.logging import get_logger
from shopbridge.shared.utils.merge import deep_merge

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RequestOptions:
    """Typed request configuration.

    Mapping fields (headers, params, data) merge key by key; every other
    field is replaced by the per-call value when that value is set.
    """

    method: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)
    timeout: float | None = None
    content: bytes | str | None = None
    json: Any = None
    files: dict[str, Any] | None = None

    def merge(self, other: RequestOptions | None) -> RequestOptions:
        """Return these options overlaid with ``other``."""
        if other is None:
            return self
        return replace(
            self,
            method=other.method if other.method is not None else self.method,
            headers=deep_merge(self.headers, other.headers),
            params=deep_merge(self.params, other.params),
            data=deep_merge(self.data, other.data),
            timeout=other.timeout if other.timeout is not None else self.timeout,
            content=other.content if other.content is not None else self.content,
            json=other.json if other.json is not None else self.json,
            files=other.files if other.files is not None else self.files,
        )


@dataclass(frozen=True)
class RetryPolicy:
    """Rate-limit and retry timing.

    Attributes:
        attempts: Maximum re-issued requests after a 5xx response.
        base_delay: Seconds; the delay after failed attempt n is base_delay * 2**n, jittered.
        rate_limit_delay: Seconds to wait on 429 without Retry-After.
        retry_threshold: A re-issued response retries again only when status > threshold.
    """

    attempts: int = 3
    base_delay: float = 0.1
    rate_limit_delay: float = 1.0
    retry_threshold: int = 500


@dataclass
class RetryState:
    """Per-call retry bookkeeping; never shared between calls."""

    attempt: int = 0
    delay: float = 0.0


class ResilientClient:
    """httpx wrapper applying base options, 429 waits and 5xx retries."""

    def __init__(
        self,
        options: RequestOptions | None = None,
        *,
        policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
        random_source: Callable[[], float] = random.random,
    ) -> None:
        self._options = options or RequestOptions()
        self._policy = policy or RetryPolicy()
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None
        self._sleep = sleep
        self._random = random_source

    @property
    def options(self) -> RequestOptions:
        return self._options

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def send(self, url: str, options: RequestOptions | None = None) -> httpx.Response:
        """Issue a request with base options merged with ``options``.

        - 2xx: returned immediately.
        - 429: waits Retry-After seconds (or the policy default) and returns
          the original 429 response; the request is not re-issued.
        - >= 500: re-issued up to policy.attempts times with jittered
          exponential backoff; the last response obtained is returned.

        Transport errors on the first request propagate; inside the retry
        loop they count as failed attempts.
        """
        merged = self._options.merge(options)
        response = await self._issue(url, merged)
        if response.is_success:
            return response
        if response.status_code == 429:
            await self._wait_for_rate_limit(response)
        if response.status_code >= 500:
            response = await self._retry(url, merged, response)
        return response

    async def _issue(self, url: str, options: RequestOptions) -> httpx.Response:
        kwargs: dict[str, Any] = {"headers": options.headers}
        if options.params:
            kwargs["params"] = options.params
        if options.data:
            kwargs["data"] = options.data
        if options.files is not None:
            kwargs["files"] = options.files
        if options.content is not None:
            kwargs["content"] = options.content
        if options.json is not None:
            kwargs["json"] = options.json
        if options.timeout is not None:
            kwargs["timeout"] = options.timeout
        return await self._http.request(options.method or "GET", url, **kwargs)

    async def _wait_for_rate_limit(self, response: httpx.Response) -> None:
        retry_after = response.headers.get("Retry-After")
        delay = self._policy.rate_limit_delay
        if retry_after:
            try:
                seconds = float(retry_after)
            except ValueError:
                logger.debug("Ignoring non-numeric Retry-After: %r", retry_after)
            else:
                if math.isfinite(seconds) and seconds >= 0:
                    delay = seconds
        logger.debug("Rate limited on %s; waiting %.3fs", response.request.url, delay)
        await self._sleep(delay)

    async def _retry(
        self,
        url: str,
        options: RequestOptions,
        response: httpx.Response,
    ) -> httpx.Response:
        state = RetryState()
        last = response
        while True:
            try:
                last = await self._issue(url, options)
                if last.status_code <= self._policy.retry_threshold:
                    return last
            except httpx.TransportError as e:
                logger.debug("Retry attempt %d for %s failed: %s", state.attempt + 1, url, e)

            state.attempt += 1
            if state.attempt >= self._policy.attempts:
                return last

            delay = self._policy.base_delay * 2**state.attempt
            state.delay = delay / 2 + self._random() * delay / 2
            logger.debug(
                "Retrying %s (attempt %d) in %.3fs",
                url,
                state.attempt + 1,
                state.delay,
            )
            await self._sleep(state.delay)
