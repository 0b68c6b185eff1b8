"""Security: verification of inbound platform requests."""

from shopbridge.infrastructure.security.verification import (
    RequestVerifier,
    canonical_query,
    encode_digest,
    verify_proxy,
    verify_session,
    verify_webhook,
)

__all__ = [
    "RequestVerifier",
    "canonical_query",
    "encode_digest",
    "verify_proxy",
    "verify_session",
    "verify_webhook",
]
