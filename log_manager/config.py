"""Configuration management for Log Manager."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Path for persisted settings
SETTINGS_FILE = Path("./data/settings.json")


class StorageType(str, Enum):
    """Where audit entries are written."""

    DATABASE = "database"
    FILE = "file"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_MANAGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Log Manager"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/log_manager.db"

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path("./data"))

    # === Storage Settings ===
    storage_type: StorageType = StorageType.DATABASE
    file_path: str = ""  # Directory holding log-manager.txt when storage_type=file

    # Timestamps are written as wall-clock time in this zone
    timezone: str = "Asia/Kolkata"

    # List views show at most this many characters of a message
    message_preview_length: int = 120

    # Post types whose edits are recorded as Settings changes (post_type -> label)
    settings_post_types: dict[str, str] = Field(
        default_factory=lambda: {
            "acf-field": "ACF Field",
            "acf-field-group": "ACF Field Group",
        }
    )

    @field_validator("storage_type", mode="before")
    @classmethod
    def validate_storage_type(cls, v: Any) -> Any:
        """Accept the legacy 'textfile' value as the file backend."""
        if isinstance(v, str):
            v = v.strip().lower()
            if v == "textfile":
                return StorageType.FILE.value
        return v

    @field_validator("file_path")
    @classmethod
    def validate_file_path(cls, v: str) -> str:
        """Strip whitespace and trailing separators from the log directory."""
        v = v.strip()
        if len(v) > 1:
            v = v.rstrip("/\\") or v[0]
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate that the timezone is a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


settings = Settings()


def get_config_dict() -> dict[str, Any]:
    """Get config as dict for API responses."""
    return {
        "app_name": settings.app_name,
        "debug": settings.debug,
        "storage_type": settings.storage_type.value,
        "file_path": settings.file_path,
        "timezone": settings.timezone,
        "message_preview_length": settings.message_preview_length,
    }


def update_config(updates: dict[str, Any]) -> None:
    """Update config values and persist to file.

    Values are validated against a copy of the current settings first, so a
    bad update leaves the live settings untouched.
    """
    candidate = settings.model_dump()
    candidate.update({k: v for k, v in updates.items() if hasattr(settings, k)})
    validated = Settings(**candidate)

    for key in updates:
        if hasattr(settings, key):
            setattr(settings, key, getattr(validated, key))

    # Persist to file
    save_settings()


def save_settings() -> None:
    """Save current settings to file."""
    # Only save settings that should persist (not from .env)
    persist_keys = [
        "debug",
        "storage_type", "file_path",
        "timezone", "message_preview_length",
    ]

    data = {}
    for key in persist_keys:
        if hasattr(settings, key):
            value = getattr(settings, key)
            if isinstance(value, Path):
                value = str(value)
            elif isinstance(value, Enum):
                value = value.value
            data[key] = value

    SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(SETTINGS_FILE, "w") as f:
        json.dump(data, f, indent=2)


def load_settings() -> None:
    """Load settings from file on startup."""
    if not SETTINGS_FILE.exists():
        return

    try:
        with open(SETTINGS_FILE) as f:
            data = json.load(f)

        # Validate settings before applying
        try:
            current_dict = settings.model_dump()
            current_dict.update({k: v for k, v in data.items() if v is not None})
            validated = Settings(**current_dict)
        except ValidationError as e:
            logger.warning(f"Settings validation failed, using defaults: {e}")
            return

        # Apply validated settings
        for key, value in data.items():
            if hasattr(settings, key) and value is not None:
                setattr(settings, key, getattr(validated, key))

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in settings file: {e}")
    except Exception as e:
        logger.error(f"Could not load settings: {e}")


def validate_critical_settings() -> None:
    """Validate critical settings and log warnings for potential issues."""
    if settings.storage_type == StorageType.FILE and not settings.file_path:
        logger.warning(
            "File storage selected but LOG_MANAGER_FILE_PATH is empty - "
            "audit entries will be dropped until a directory is configured."
        )

    if settings.debug and settings.host == "0.0.0.0":
        logger.warning(
            "Running in debug mode with public host binding (0.0.0.0). "
            "Disable debug mode for production deployments."
        )


# Load persisted settings on startup
load_settings()
validate_critical_settings()
