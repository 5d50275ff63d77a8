"""Settings loader with hierarchical configuration support."""

import json
import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from src.commons.settings.models import Settings

# Flat variable names used by existing deployments, mapped to nested keys.
LEGACY_ENV_ALIASES: dict[str, tuple[str, ...]] = {
    "PORT": ("server", "port"),
    "MINIO_ENDPOINT": ("blob_storage", "endpoint"),
    "MINIO_PORT": ("blob_storage", "port"),
    "MINIO_USE_SSL": ("blob_storage", "use_ssl"),
    "MINIO_ACCESS_KEY": ("blob_storage", "access_key"),
    "MINIO_SECRET_KEY": ("blob_storage", "secret_key"),
    "UPLOAD_DIR": ("storage", "upload_dir"),
    "HLS_OUTPUT_DIR": ("storage", "hls_output_dir"),
    "HLS_PUBLIC_URL": ("storage", "hls_public_url"),
    "FFMPEG_PATH": ("transcoding", "ffmpeg_path"),
    "MAX_UPLOAD_SIZE_BYTES": ("upload", "max_size_bytes"),
}


class SettingsLoader:
    """Loads and merges configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. Prefixed environment variables (VIDEO_API__SECTION__KEY)
    2. Legacy flat variables (MINIO_ENDPOINT, UPLOAD_DIR, ...), taken from
       the process environment first and the ``.env`` file second
    3. Environment-specific config (appsettings.{env}.json)
    4. Base config (appsettings.json)
    """

    ENV_PREFIX = "VIDEO_API__"

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
        env_file: Path | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to 'config' in current working directory.
            environment: Environment name (dev, staging, prod).
                        Defaults to VIDEO_API__APP__ENVIRONMENT or 'dev'.
            env_file: Dotenv file holding legacy flat variables.
                     Defaults to '.env' in current working directory.
        """
        self.config_dir = config_dir or Path("config")
        self.env_file = env_file or Path(".env")
        self.environment = environment or os.getenv(
            "VIDEO_API__APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Load settings with proper precedence.

        Returns:
            Fully resolved Settings instance.
        """
        config = self._load_json("appsettings.json")

        env_config = self._load_json(f"appsettings.{self.environment}.json")
        config = self._deep_merge(config, env_config)

        config = self._deep_merge(config, self._load_legacy_env_vars())
        config = self._deep_merge(config, self._load_env_vars())

        return Settings(**config)

    def _load_env_vars(self) -> dict[str, Any]:
        """Load environment variables with the VIDEO_API__ prefix.

        Parses env vars like VIDEO_API__BLOB_STORAGE__ENDPOINT into nested dicts:
        {"blob_storage": {"endpoint": "value"}}

        Returns:
            Nested dictionary of environment variable overrides.
        """
        result: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue

            key_path = key[len(self.ENV_PREFIX) :].lower().split("__")
            self._set_nested(result, key_path, self._coerce_value(value))

        return result

    def _load_legacy_env_vars(self) -> dict[str, Any]:
        """Load the flat variable names listed in LEGACY_ENV_ALIASES.

        Values stay strings; pydantic converts ports, flags and sizes, and
        credentials that look numeric are kept as text.
        """
        file_values = dotenv_values(self.env_file)
        result: dict[str, Any] = {}
        for name, key_path in LEGACY_ENV_ALIASES.items():
            value = os.environ.get(name, file_values.get(name))
            if value is None or value == "":
                continue
            self._set_nested(result, list(key_path), value)
        return result

    @staticmethod
    def _set_nested(target: dict[str, Any], key_path: list[str], value: Any) -> None:
        current = target
        for part in key_path[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]
        current[key_path[-1]] = value

    def _coerce_value(self, value: str) -> Any:
        """Coerce string environment variable to appropriate type.

        Args:
            value: String value from environment.

        Returns:
            Coerced value (bool, int, float, or original string).
        """
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        # Lists/dicts such as CORS origins
        if value.startswith(("[", "{")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _load_json(self, filename: str) -> dict[str, Any]:
        """Load JSON config file.

        Args:
            filename: Name of the config file.

        Returns:
            Parsed JSON as dictionary, or empty dict if file doesn't exist.
        """
        path = self.config_dir / filename
        if path.exists():
            with path.open(encoding="utf-8") as f:
                return dict(json.load(f))
        return {}

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries.

        Args:
            base: Base dictionary.
            override: Dictionary with values to override.

        Returns:
            Merged dictionary.
        """
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the global settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force reload settings from files.

    Returns:
        Settings instance.
    """
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _settings = loader.load()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance. Useful for testing."""
    global _settings  # noqa: PLW0603
    _settings = None
