"""Domain exceptions for shopbridge.

Every error raised by the storage adapters and the request verifier
derives from ShopbridgeException, so callers can map them to HTTP
responses using message, error_code, and details.

Platform errors additionally carry an ErrorKind, an HTTP-like status and
the raw error payload reported by the platform (GraphQL ``errors``,
``userErrors`` or per-file ``fileErrors``).
"""

from typing import Any

from shopbridge.shared.enums import ErrorKind


class ShopbridgeException(Exception):
    """Base exception for all shopbridge errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. key, status).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ShopbridgeException):
    """Raised when a component cannot be built from the given configuration."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIGURATION_ERROR")


class PlatformException(ShopbridgeException):
    """A classified failure of a remote platform or storage operation.

    Attributes:
        kind: ErrorKind tag (user, server, request, processing).
        status: HTTP-like status code.
        errors: Raw error entries reported by the platform, if any.
    """

    kind: ErrorKind = ErrorKind.SERVER
    default_status: int = 400

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        errors: list[Any] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status = status if status is not None else self.default_status
        self.errors = list(errors or [])
        super().__init__(
            message,
            f"{self.kind.value.upper()}_ERROR",
            {**(details or {}), "status": self.status, "kind": self.kind.value},
        )


class UserError(PlatformException):
    """Platform-reported validation failure (userErrors / fileErrors); client-correctable."""

    kind = ErrorKind.USER


class ServerError(PlatformException):
    """Platform transport or GraphQL envelope failure."""

    kind = ErrorKind.SERVER


class RequestError(PlatformException):
    """Local transport failure, e.g. non-2xx on the direct upload."""

    kind = ErrorKind.REQUEST
    default_status = 500


class FileNotFoundException(RequestError):
    """Key does not resolve to a stored object."""

    default_status = 404

    def __init__(self, key: str) -> None:
        super().__init__("File not found", details={"key": key})


class ProcessingError(PlatformException):
    """Asynchronous file processing reached FAILED."""

    kind = ErrorKind.PROCESSING


class AuthenticationException(ShopbridgeException):
    """Raised when an inbound credential is present but cannot be trusted."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class TokenVerificationError(AuthenticationException):
    """Session token has a bad signature, is expired, or is not yet valid."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid token: {reason}")
        self.details = {"reason": reason}


class SignatureKeyError(ShopbridgeException):
    """Key material for HMAC verification is missing or malformed."""

    def __init__(self, message: str = "HMAC secret must be a non-empty string") -> None:
        super().__init__(message, "SIGNATURE_KEY_ERROR")
