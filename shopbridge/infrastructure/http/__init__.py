"""Outbound HTTP: resilient request client."""

from shopbridge.infrastructure.http.fetcher import (
    RequestOptions,
    ResilientClient,
    RetryPolicy,
)

__all__ = ["RequestOptions", "ResilientClient", "RetryPolicy"]
