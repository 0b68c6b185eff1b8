"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend-specific requirements (shop domain and token
set together for the platform backend, bucket name for the bucket backend)
are validated at load time; names such as storage_backend are lowercased.

Components never read settings on their own; callers pass the values they
need into constructors (see StorageFactory).
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    All settings have defaults; validate_backend enforces the fields the
    selected storage backend cannot work without.
    """

    # Logging: one of "debug", "info", "warning", "error".
    log_level: str = "error"

    # Storage: "platform" (GraphQL Files API) or "bucket" (S3-compatible)
    storage_backend: str = "platform"

    # Platform API
    shop_domain: str = ""
    platform_access_token: SecretStr = SecretStr("")
    platform_api_type: str = "admin"
    platform_api_version: str = "latest"

    # App credentials used to verify inbound requests
    api_key: str = ""
    api_secret: SecretStr = SecretStr("")
    hmac_header_name: str = "X-Shopify-Hmac-Sha256"
    hmac_tolerance_seconds: int = 90
    token_leeway_seconds: int = 10

    # Outbound requests
    request_timeout_seconds: float = 30.0
    retry_attempts: int = 3
    retry_base_delay: float = 0.1  # seconds, doubled per attempt
    rate_limit_delay: float = 1.0  # seconds, when Retry-After is absent

    # Staged upload polling
    upload_poll_interval: float = 0.75

    # Bucket (R2, S3, MinIO)
    bucket_name: str | None = None
    bucket_prefix: str = ""
    bucket_region: str = "auto"
    bucket_endpoint_url: str | None = None
    bucket_access_key: str | None = None
    bucket_secret_key: SecretStr | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Normalize names, then validate log level and the storage backend.

        - platform: SHOP_DOMAIN and PLATFORM_ACCESS_TOKEN go together. Both
          may be left unset by apps that only verify inbound requests;
          StorageFactory refuses to build the backend without them.
        - bucket: BUCKET_NAME required.
        """
        self.log_level = self.log_level.strip().lower()
        self.storage_backend = self.storage_backend.strip().lower()
        self.platform_api_type = self.platform_api_type.strip().lower()

        if self.log_level not in ("debug", "info", "warning", "error"):
            raise ValueError(
                f"log_level must be one of debug, info, warning, error; got {self.log_level!r}"
            )
        if self.storage_backend == "platform":
            has_token = bool(self.platform_access_token.get_secret_value())
            if has_token and not self.shop_domain:
                raise ValueError(
                    "SHOP_DOMAIN is required when PLATFORM_ACCESS_TOKEN is set. "
                    "Set in environment or .env file."
                )
            if self.shop_domain and not has_token:
                raise ValueError(
                    "PLATFORM_ACCESS_TOKEN is required when SHOP_DOMAIN is set."
                )
        elif self.storage_backend == "bucket":
            if not self.bucket_name:
                raise ValueError(
                    "bucket_name is required when storage_backend is 'bucket'. "
                    "Set BUCKET_NAME environment variable or update .env file."
                )
        else:
            raise ValueError(
                f"Invalid storage_backend '{self.storage_backend}'. "
                "Must be one of: 'platform', 'bucket'"
            )
        if self.platform_api_type not in ("admin", "customer", "storefront"):
            raise ValueError(
                f"platform_api_type must be 'admin', 'customer' or 'storefront', "
                f"got: {self.platform_api_type!r}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
