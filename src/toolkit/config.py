"""Toolkit configuration using environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_MAX_FILE_SIZE = 1024 * 1024 * 1024
DEFAULT_MAX_JSON_SIZE = 1024 * 1024
DEFAULT_DIRECTORY_MODE = 0o755


class ToolkitSettings(BaseSettings):
    """Load toolkit limits and policies from environment variables and `.env`.

    Every field is fully resolved at construction time, so the helpers never
    have to substitute defaults for missing values themselves.
    """

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        ge=1,
        validation_alias=AliasChoices("TOOLKIT_MAX_FILE_SIZE", "max_file_size"),
    )
    # Empty list allows every sniffed type
    allowed_file_types: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "TOOLKIT_ALLOWED_FILE_TYPES",
            "allowed_file_types",
        ),
    )
    max_json_size: int = Field(
        default=DEFAULT_MAX_JSON_SIZE,
        ge=1,
        validation_alias=AliasChoices("TOOLKIT_MAX_JSON_SIZE", "max_json_size"),
    )
    allow_unknown_fields: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "TOOLKIT_ALLOW_UNKNOWN_FIELDS",
            "allow_unknown_fields",
        ),
    )
    directory_mode: int = Field(
        default=DEFAULT_DIRECTORY_MODE,
        ge=0,
        le=0o7777,
        validation_alias=AliasChoices("TOOLKIT_DIRECTORY_MODE", "directory_mode"),
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("TOOLKIT_LOG_LEVEL", "LOG_LEVEL", "log_level"),
    )


@lru_cache(maxsize=1)
def get_settings() -> ToolkitSettings:
    """Return a cached `ToolkitSettings` instance."""

    return ToolkitSettings()


__all__ = [
    "DEFAULT_DIRECTORY_MODE",
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_MAX_JSON_SIZE",
    "ToolkitSettings",
    "get_settings",
]
