"""Unit tests for settings models and loader."""

import json
import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from src.commons.settings.loader import (
    LEGACY_ENV_ALIASES,
    SettingsLoader,
    get_settings,
    reset_settings,
)
from src.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    IngestionSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    TelemetrySettings,
    TranscodingSettings,
    UploadSettings,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the loader reads from the environment."""
    for key in list(os.environ):
        if key.startswith(SettingsLoader.ENV_PREFIX) or key in LEGACY_ENV_ALIASES:
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestAppSettings:
    """Tests for AppSettings model."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.name == "lesson-video-api"
        assert settings.environment == "dev"
        assert settings.log_level == "INFO"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            AppSettings(environment="invalid")  # type: ignore[arg-type]


class TestServerSettings:
    """Tests for ServerSettings model."""

    def test_default_port(self):
        assert ServerSettings().port == 3001

    def test_port_validation(self):
        assert ServerSettings(port=8080).port == 8080

        with pytest.raises(ValueError):
            ServerSettings(port=0)

        with pytest.raises(ValueError):
            ServerSettings(port=70000)


class TestBlobStorageSettings:
    """Tests for BlobStorageSettings model."""

    def test_default_values(self):
        settings = BlobStorageSettings()
        assert settings.endpoint == "minio.racoondevs.com"
        assert settings.port == 443
        assert settings.use_ssl is False
        assert settings.buckets.raw_videos == "raw-videos"

    def test_address_joins_host_and_port(self):
        settings = BlobStorageSettings(endpoint="minio.local", port=9000)
        assert settings.address == "minio.local:9000"

    def test_address_without_port(self):
        settings = BlobStorageSettings(endpoint="minio.local", port=None)
        assert settings.address == "minio.local"

    def test_address_keeps_explicit_port_in_endpoint(self):
        settings = BlobStorageSettings(endpoint="minio.local:9001", port=443)
        assert settings.address == "minio.local:9001"


class TestStorageAndTranscodingSettings:
    """Tests for filesystem and FFmpeg settings."""

    def test_storage_defaults(self):
        settings = StorageSettings()
        assert settings.upload_dir == "/opt/video-stack/uploads"
        assert settings.hls_output_dir == "/opt/video-stack/hls-data"
        assert settings.hls_public_url == "https://videos.racoondevs.com"

    def test_transcoding_defaults(self):
        settings = TranscodingSettings()
        assert settings.ffmpeg_path == "ffmpeg"
        assert settings.segment_seconds == 10
        assert settings.manifest_name == "index.m3u8"
        assert settings.timeout_seconds is None
        assert settings.max_concurrent_transcodes == 2

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            TranscodingSettings(timeout_seconds=0)

    def test_upload_limit_default(self):
        assert UploadSettings().max_size_bytes == 5000 * 1024 * 1024

    def test_entity_kind_pattern(self):
        assert IngestionSettings(entity_kind="courses").entity_kind == "courses"
        with pytest.raises(ValueError):
            IngestionSettings(entity_kind="Bad/Kind")


class TestRootSettings:
    """Tests for root Settings model."""

    def test_default_sections(self, clean_env):
        settings = Settings()
        assert isinstance(settings.app, AppSettings)
        assert isinstance(settings.blob_storage, BlobStorageSettings)
        assert isinstance(settings.transcoding, TranscodingSettings)
        assert isinstance(settings.telemetry, TelemetrySettings)


class TestSettingsLoader:
    """Tests for SettingsLoader."""

    def test_load_empty_config(self, clean_env):
        with TemporaryDirectory() as tmpdir:
            loader = SettingsLoader(config_dir=Path(tmpdir), environment="dev")
            settings = loader.load()
            assert settings.app.name == "lesson-video-api"

    def test_load_environment_override(self, clean_env):
        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)
            base_config = {
                "server": {"port": 4000},
                "storage": {"upload_dir": "/data/uploads"},
            }
            with (config_dir / "appsettings.json").open("w") as f:
                json.dump(base_config, f)

            prod_config = {"server": {"docs_enabled": False}}
            with (config_dir / "appsettings.prod.json").open("w") as f:
                json.dump(prod_config, f)

            settings = SettingsLoader(config_dir=config_dir, environment="prod").load()

            assert settings.server.port == 4000
            assert settings.storage.upload_dir == "/data/uploads"
            assert settings.server.docs_enabled is False

    def test_legacy_env_vars(self, clean_env):
        clean_env.setenv("MINIO_ENDPOINT", "minio.internal")
        clean_env.setenv("MINIO_PORT", "9000")
        clean_env.setenv("MINIO_USE_SSL", "true")
        clean_env.setenv("HLS_PUBLIC_URL", "https://cdn.example.com")
        clean_env.setenv("MAX_UPLOAD_SIZE_BYTES", "1048576")

        with TemporaryDirectory() as tmpdir:
            settings = SettingsLoader(config_dir=Path(tmpdir)).load()

        assert settings.blob_storage.endpoint == "minio.internal"
        assert settings.blob_storage.port == 9000
        assert settings.blob_storage.use_ssl is True
        assert settings.storage.hls_public_url == "https://cdn.example.com"
        assert settings.upload.max_size_bytes == 1048576

    def test_legacy_env_overrides_json(self, clean_env):
        clean_env.setenv("UPLOAD_DIR", "/from/env")
        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)
            with (config_dir / "appsettings.json").open("w") as f:
                json.dump({"storage": {"upload_dir": "/from/json"}}, f)

            settings = SettingsLoader(config_dir=config_dir).load()

        assert settings.storage.upload_dir == "/from/env"

    def test_prefixed_env_overrides_legacy(self, clean_env):
        clean_env.setenv("FFMPEG_PATH", "/usr/bin/ffmpeg")
        clean_env.setenv("VIDEO_API__TRANSCODING__FFMPEG_PATH", "/opt/ffmpeg")

        with TemporaryDirectory() as tmpdir:
            settings = SettingsLoader(config_dir=Path(tmpdir)).load()

        assert settings.transcoding.ffmpeg_path == "/opt/ffmpeg"

    def test_numeric_credentials_stay_strings(self, clean_env):
        clean_env.setenv("MINIO_ACCESS_KEY", "123456")
        clean_env.setenv("MINIO_SECRET_KEY", "0042")

        with TemporaryDirectory() as tmpdir:
            settings = SettingsLoader(config_dir=Path(tmpdir)).load()

        assert settings.blob_storage.access_key == "123456"
        assert settings.blob_storage.secret_key == "0042"

    def test_legacy_vars_from_dotenv_file(self, clean_env):
        with TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / ".env"
            env_file.write_text(
                "MINIO_ENDPOINT=10.0.0.5\n"
                "MINIO_PORT=9000\n"
                "MINIO_ACCESS_KEY=123456\n"
                "UPLOAD_DIR=/srv/uploads\n"
            )

            settings = SettingsLoader(
                config_dir=Path(tmpdir), env_file=env_file
            ).load()

        assert settings.blob_storage.address == "10.0.0.5:9000"
        assert settings.blob_storage.access_key == "123456"
        assert settings.storage.upload_dir == "/srv/uploads"

    def test_process_env_overrides_dotenv_file(self, clean_env):
        clean_env.setenv("MINIO_ENDPOINT", "minio.internal")

        with TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / ".env"
            env_file.write_text("MINIO_ENDPOINT=10.0.0.5\nMINIO_PORT=9000\n")

            settings = SettingsLoader(
                config_dir=Path(tmpdir), env_file=env_file
            ).load()

        assert settings.blob_storage.endpoint == "minio.internal"
        assert settings.blob_storage.port == 9000

    def test_missing_dotenv_file_is_fine(self, clean_env):
        with TemporaryDirectory() as tmpdir:
            settings = SettingsLoader(
                config_dir=Path(tmpdir), env_file=Path(tmpdir) / "absent.env"
            ).load()

        assert settings.blob_storage.endpoint == "minio.racoondevs.com"

    def test_empty_legacy_value_is_ignored(self, clean_env):
        clean_env.setenv("HLS_OUTPUT_DIR", "")
        with TemporaryDirectory() as tmpdir:
            settings = SettingsLoader(config_dir=Path(tmpdir)).load()
        assert settings.storage.hls_output_dir == "/opt/video-stack/hls-data"

    def test_coerce_value(self):
        loader = SettingsLoader()
        assert loader._coerce_value("true") is True
        assert loader._coerce_value("42") == 42
        assert loader._coerce_value("1.5") == 1.5
        assert loader._coerce_value('["a", "b"]') == ["a", "b"]
        assert loader._coerce_value("minio") == "minio"

    def test_deep_merge(self):
        loader = SettingsLoader()
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        override = {"a": {"b": 10, "e": 4}, "f": 5}

        result = loader._deep_merge(base, override)

        assert result == {"a": {"b": 10, "c": 2, "e": 4}, "d": 3, "f": 5}


class TestGetSettings:
    """Tests for get_settings function."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_get_settings_cached(self, clean_env):
        with TemporaryDirectory() as tmpdir:
            settings1 = get_settings(config_dir=Path(tmpdir))
            settings2 = get_settings(config_dir=Path(tmpdir))
            assert settings1 is settings2

    def test_get_settings_reload(self, clean_env):
        with TemporaryDirectory() as tmpdir:
            settings1 = get_settings(config_dir=Path(tmpdir))
            settings2 = get_settings(config_dir=Path(tmpdir), reload=True)
            assert settings1 is not settings2
