"""Shared enumerations for shopbridge.

Cross-cutting enums used by domain and infrastructure (error kinds,
remote file status, API flavour, signature transport).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ErrorKind(_ValuesMixin, str, Enum):
    """Classification of a failed platform or storage operation."""

    USER = "user"  # platform-reported validation failure
    SERVER = "server"  # transport or GraphQL envelope failure
    REQUEST = "request"  # local transport failure, not found
    PROCESSING = "processing"  # asynchronous job reached FAILED


class FileStatus(_ValuesMixin, str, Enum):
    """Processing status of a remote file after linking."""

    UNPROCESSED = "UNPROCESSED"
    PROCESSING = "PROCESSING"
    READY = "READY"
    FAILED = "FAILED"


class ApiType(_ValuesMixin, str, Enum):
    """Platform GraphQL API flavour."""

    ADMIN = "admin"
    CUSTOMER = "customer"
    STOREFRONT = "storefront"


class SignatureSource(_ValuesMixin, str, Enum):
    """Where an inbound HMAC signature travels."""

    HEADER = "header"
    URL = "url"
