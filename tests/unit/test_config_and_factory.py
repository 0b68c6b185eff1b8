"""Tests for Settings validation and StorageFactory backend selection."""

import pytest
from pydantic import ValidationError

from shopbridge.core.config import Settings
from shopbridge.domain.exceptions import ConfigurationError
from shopbridge.infrastructure.external.storage import StorageFactory
from shopbridge.infrastructure.external.storage.bucket_storage import BucketFileStorage
from shopbridge.infrastructure.external.storage.platform_storage import PlatformFileStorage


class TestSettingsValidation:
    def test_platform_requires_shop_domain(self) -> None:
        with pytest.raises(ValidationError, match="SHOP_DOMAIN"):
            Settings(_env_file=None, storage_backend="platform", platform_access_token="t")

    def test_platform_requires_token(self) -> None:
        with pytest.raises(ValidationError, match="PLATFORM_ACCESS_TOKEN"):
            Settings(_env_file=None, storage_backend="platform", shop_domain="s.myshopify.com")

    def test_verification_only_settings_load_without_storage_credentials(self) -> None:
        s = Settings(_env_file=None, api_key="key", api_secret="secret")
        assert s.storage_backend == "platform"
        assert s.shop_domain == ""

    def test_names_are_normalized(self) -> None:
        s = Settings(
            _env_file=None,
            storage_backend=" Bucket ",
            bucket_name="b",
            log_level="DEBUG",
            platform_api_type="Storefront",
        )
        assert s.storage_backend == "bucket"
        assert s.log_level == "debug"
        assert s.platform_api_type == "storefront"

    def test_bucket_requires_name(self) -> None:
        with pytest.raises(ValidationError, match="bucket_name"):
            Settings(_env_file=None, storage_backend="bucket")

    def test_unknown_backend_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Invalid storage_backend"):
            Settings(_env_file=None, storage_backend="ftp")

    def test_unknown_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError, match="log_level"):
            Settings(_env_file=None, storage_backend="bucket", bucket_name="b", log_level="trace")

    def test_unknown_api_type_rejected(self) -> None:
        with pytest.raises(ValidationError, match="platform_api_type"):
            Settings(
                _env_file=None,
                storage_backend="bucket",
                bucket_name="b",
                platform_api_type="partner",
            )

    def test_defaults(self, platform_settings: Settings) -> None:
        assert platform_settings.log_level == "error"
        assert platform_settings.hmac_tolerance_seconds == 90
        assert platform_settings.retry_attempts == 3
        assert platform_settings.upload_poll_interval == 0.75
        assert platform_settings.platform_access_token.get_secret_value() == "shpat_test"

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORAGE_BACKEND", "bucket")
        monkeypatch.setenv("BUCKET_NAME", "from-env")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        s = Settings(_env_file=None)
        assert s.bucket_name == "from-env"
        assert s.log_level == "debug"


class TestStorageFactory:
    def test_platform_backend(self, platform_settings: Settings) -> None:
        storage = StorageFactory.create_storage_service(platform_settings)
        assert isinstance(storage, PlatformFileStorage)

    def test_bucket_backend(self) -> None:
        settings = Settings(
            _env_file=None,
            storage_backend="bucket",
            bucket_name="assets",
            bucket_prefix="shop-a",
            bucket_endpoint_url="https://account.r2.cloudflarestorage.com",
            bucket_access_key="key",
            bucket_secret_key="secret",
        )
        storage = StorageFactory.create_storage_service(settings)
        assert isinstance(storage, BucketFileStorage)
        assert storage.bucket == "assets"
        assert storage.prefix == "shop-a/"

    def test_unknown_backend_raises(self) -> None:
        settings = Settings.model_construct(storage_backend="ftp")
        with pytest.raises(ConfigurationError, match="Unknown storage backend"):
            StorageFactory.create_storage_service(settings)

    def test_platform_without_credentials_raises(self) -> None:
        settings = Settings.model_construct(storage_backend="platform")
        with pytest.raises(ConfigurationError):
            StorageFactory.create_storage_service(settings)

    def test_platform_backend_requires_credentials_at_build_time(self) -> None:
        settings = Settings(_env_file=None, storage_backend="platform")
        with pytest.raises(ConfigurationError, match="SHOP_DOMAIN"):
            StorageFactory.create_storage_service(settings)

    def test_uses_cached_settings_when_none_given(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORAGE_BACKEND", "bucket")
        monkeypatch.setenv("BUCKET_NAME", "env-bucket")
        monkeypatch.setenv("BUCKET_ACCESS_KEY", "key")
        monkeypatch.setenv("BUCKET_SECRET_KEY", "secret")
        monkeypatch.setenv("BUCKET_ENDPOINT_URL", "http://localhost:9000")
        storage = StorageFactory.create_storage_service()
        assert isinstance(storage, BucketFileStorage)
        assert storage.bucket == "env-bucket"
