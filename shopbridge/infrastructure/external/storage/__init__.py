"""Storage: platform Files API and S3-compatible bucket backends.

Factory creates a backend from shopbridge.core.config. Implementations are
loaded lazily inside StorageFactory.create_storage_service() so that the
platform backend does not import boto3.

Implementations implement StorageProtocol (get, has, list, put, set, remove).
"""

from shopbridge.infrastructure.external.storage.factory import StorageFactory
from shopbridge.infrastructure.external.storage.protocol import StorageProtocol

__all__ = [
    "StorageFactory",
    "StorageProtocol",
]
