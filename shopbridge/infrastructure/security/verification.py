"""Verification of inbound platform requests: HMAC signatures and session tokens.

Two operations with deliberately different failure styles:

- hmac(): returns a verdict. True / False for a definite answer, None when
  verification does not apply (replay window exceeded). None must be treated
  as "not authenticated".
- token(): returns the claims, or None when there is no token or the
  audience is not this app. A token that is present but expired, not yet
  valid, or badly signed raises TokenVerificationError.

Uses python-jose for JWT verification and hmac.compare_digest for the
constant-time signature comparison.
"""

from __future__ import annotations

import base64
import hashlib
import hmac as _hmac
import time
from collections.abc import Callable, Mapping
from typing import Any, Protocol
from urllib.parse import parse_qs, urlsplit

import httpx
from jose import JWTError, jwt

from shopbridge.core.config import Settings, get_settings
from shopbridge.domain.exceptions import SignatureKeyError, TokenVerificationError
from shopbridge.shared.enums import SignatureSource

DEFAULT_HMAC_HEADER = "X-Shopify-Hmac-Sha256"


class InboundRequest(Protocol):
    """The slice of a framework request the verifier reads (e.g. Starlette's)."""

    url: Any
    headers: Mapping[str, str]

    async def body(self) -> bytes: ...


def encode_digest(digest: bytes, encoding: str) -> str:
    """Encode a raw digest as ``base64`` or ``hex``."""
    if encoding == "base64":
        return base64.b64encode(digest).decode("ascii")
    if encoding == "hex":
        return digest.hex()
    raise ValueError(f"Unsupported digest encoding: {encoding!r}")


def canonical_query(query: Mapping[str, list[str]], exclude: str = "signature") -> str:
    """Rebuild the signed string of an app proxy / extension URL.

    Each parameter except ``exclude`` becomes ``key=value`` (repeated values
    joined with commas); entries are sorted by key and concatenated with
    no separator.
    """
    return "".join(
        f"{key}={','.join(values)}"
        for key, values in sorted(query.items())
        if key != exclude
    )


class RequestVerifier:
    """Verifies one inbound request. Stateless apart from the request itself."""

    def __init__(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
        *,
        hmac_header: str = DEFAULT_HMAC_HEADER,
        tolerance_seconds: int = 90,
        leeway_seconds: int = 10,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._url = str(url)
        self._headers = httpx.Headers(dict(headers or {}))
        self._body = body
        self._query = parse_qs(urlsplit(self._url).query, keep_blank_values=True)
        self._hmac_header = hmac_header
        self._tolerance = tolerance_seconds
        self._leeway = leeway_seconds
        self._algorithm = algorithm
        self._clock = clock

    @classmethod
    async def from_request(cls, request: InboundRequest, **kwargs: Any) -> RequestVerifier:
        """Build a verifier from a framework request, reading its body once."""
        body = await request.body()
        return cls(str(request.url), dict(request.headers), body, **kwargs)

    def _param(self, name: str) -> str | None:
        values = self._query.get(name)
        return values[0] if values else None

    def token(self, key: str, secret: str) -> dict[str, Any] | None:
        """Verify the session token from ``Authorization: Bearer`` or ``id_token``.

        Args:
            key: App client key; must equal the token's ``aud`` claim.
            secret: App secret the token is signed with.

        Returns:
            Decoded claims, or None when no token is present or the
            audience does not match.

        Raises:
            TokenVerificationError: Bad signature, expired, or not yet valid.
        """
        encoded = (self._headers.get("authorization") or "").removeprefix("Bearer ").strip()
        if not encoded:
            encoded = self._param("id_token") or ""
        if not encoded:
            return None

        try:
            claims = jwt.decode(
                encoded,
                secret,
                algorithms=[self._algorithm],
                options={"verify_aud": False, "leeway": self._leeway},
            )
        except JWTError as e:
            raise TokenVerificationError(str(e)) from e

        # exp and nbf are checked by jwt.decode
        if claims.get("aud") != key:
            return None
        return claims

    def hmac(self, source: SignatureSource | str, secret: str) -> bool | None:
        """Verify an HMAC-SHA256 signature carried in a header or the query string.

        Args:
            source: "header" (base64 signature over the raw body) or
                "url" (hex signature over the canonical query string).
            secret: App secret.

        Returns:
            True or False for a definite verdict; None when the request's
            ``timestamp`` is outside the permitted clock tolerance.

        Raises:
            SignatureKeyError: Secret is empty or not a string.
            ValueError: Unknown source.
        """
        if not isinstance(secret, str) or not secret:
            raise SignatureKeyError()

        source = SignatureSource(source)
        if source is SignatureSource.HEADER:
            payload = self._body
            provided = self._headers.get(self._hmac_header)
            encoding = "base64"
        else:
            payload = canonical_query(self._query).encode("utf-8")
            provided = self._param("signature")
            encoding = "hex"

        if not self._within_tolerance():
            return None

        digest = _hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()
        computed = encode_digest(digest, encoding).encode("ascii")
        if provided is None:
            return False
        received = provided.encode("utf-8")
        if len(computed) != len(received):
            return False
        return _hmac.compare_digest(computed, received)

    def _within_tolerance(self) -> bool:
        raw = self._param("timestamp")
        if raw is None or raw == "":
            return True
        try:
            timestamp = int(float(raw))
        except (ValueError, OverflowError):
            return False
        if timestamp == 0:
            return True
        return abs(int(self._clock()) - timestamp) <= self._tolerance


def _settings_kwargs(settings: Settings) -> dict[str, Any]:
    return {
        "hmac_header": settings.hmac_header_name,
        "tolerance_seconds": settings.hmac_tolerance_seconds,
        "leeway_seconds": settings.token_leeway_seconds,
    }


async def verify_webhook(request: InboundRequest, settings: Settings | None = None) -> bool | None:
    """Check the body signature of a platform webhook with the configured app secret."""
    s = settings or get_settings()
    verifier = await RequestVerifier.from_request(request, **_settings_kwargs(s))
    return verifier.hmac(SignatureSource.HEADER, s.api_secret.get_secret_value())


async def verify_proxy(request: InboundRequest, settings: Settings | None = None) -> bool | None:
    """Check the query signature of an app proxy / extension request."""
    s = settings or get_settings()
    verifier = await RequestVerifier.from_request(request, **_settings_kwargs(s))
    return verifier.hmac(SignatureSource.URL, s.api_secret.get_secret_value())


async def verify_session(
    request: InboundRequest, settings: Settings | None = None
) -> dict[str, Any] | None:
    """Return session token claims for the configured app, or None.

    Raises:
        TokenVerificationError: Token present but invalid or expired.
    """
    s = settings or get_settings()
    verifier = await RequestVerifier.from_request(request, **_settings_kwargs(s))
    return verifier.token(s.api_key, s.api_secret.get_secret_value())
