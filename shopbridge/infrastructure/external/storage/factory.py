"""Storage service factory: creates the platform or bucket backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shopbridge.domain.exceptions import ConfigurationError
from shopbridge.infrastructure.external.storage.protocol import StorageProtocol
from shopbridge.shared.logging import get_logger, setup_logging

if TYPE_CHECKING:
    from shopbridge.core.config import Settings

logger = get_logger(__name__)


class StorageFactory:
    """Factory for storage service instances based on configuration."""

    @staticmethod
    def create_storage_service(settings: "Settings | None" = None) -> StorageProtocol:
        """Create storage service from settings.

        Args:
            settings: Settings; if None, uses get_settings().

        Returns:
            PlatformFileStorage or BucketFileStorage.

        Raises:
            ConfigurationError: Unknown backend or missing required config.
        """
        from shopbridge.core.config import get_settings

        s = settings or get_settings()
        backend = s.storage_backend.lower()
        setup_logging(s.log_level)
        logger.debug("creating %s storage backend", backend)

        if backend == "platform":
            from shopbridge.infrastructure.external.storage.platform_storage import (
                PlatformFileStorage,
            )
            from shopbridge.infrastructure.http.fetcher import (
                RequestOptions,
                ResilientClient,
                RetryPolicy,
            )
            from shopbridge.infrastructure.platform.client import PlatformClient

            token = s.platform_access_token.get_secret_value()
            if not s.shop_domain or not token:
                raise ConfigurationError(
                    "SHOP_DOMAIN and PLATFORM_ACCESS_TOKEN required for platform backend"
                )
            fetcher = ResilientClient(
                RequestOptions(timeout=s.request_timeout_seconds),
                policy=RetryPolicy(
                    attempts=s.retry_attempts,
                    base_delay=s.retry_base_delay,
                    rate_limit_delay=s.rate_limit_delay,
                ),
            )
            client = PlatformClient(
                s.shop_domain,
                token,
                api_type=s.platform_api_type,
                api_version=s.platform_api_version,
                fetcher=fetcher,
            )
            return PlatformFileStorage(client, poll_interval=s.upload_poll_interval)
        if backend == "bucket":
            if not s.bucket_name:
                raise ConfigurationError("BUCKET_NAME required for bucket backend")
            try:
                from shopbridge.infrastructure.external.storage.bucket_storage import (
                    BucketFileStorage,
                )
            except ImportError as e:
                raise ConfigurationError(
                    "Bucket backend requires boto3. Install with: pip install 'shopbridge[bucket]'"
                ) from e
            return BucketFileStorage(
                s.bucket_name,
                prefix=s.bucket_prefix,
                region=s.bucket_region,
                endpoint_url=s.bucket_endpoint_url,
                access_key=s.bucket_access_key,
                secret_key=(
                    s.bucket_secret_key.get_secret_value() if s.bucket_secret_key else None
                ),
            )
        raise ConfigurationError(
            f"Unknown storage backend: {backend}. Supported: 'platform', 'bucket'"
        )
