"""Settings management module."""

from src.commons.settings.loader import SettingsLoader, get_settings, reset_settings
from src.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    BucketSettings,
    IngestionSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    TelemetrySettings,
    TranscodingSettings,
    UploadSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    # Storage
    "BlobStorageSettings",
    "BucketSettings",
    "StorageSettings",
    # Pipeline
    "TranscodingSettings",
    "UploadSettings",
    "IngestionSettings",
    # Telemetry
    "TelemetrySettings",
]
