"""Helpers for common FastAPI backend chores."""

from .config import ToolkitSettings, get_settings
from .error_handlers import register_error_handlers
from .errors import (
    DisallowedFileType,
    JSONBodyError,
    JSONErrorKind,
    NoFilesUploaded,
    SlugError,
    SlugErrorKind,
    ToolkitError,
    UploadError,
    UploadTooLarge,
)
from .logging_settings import configure_logging
from .schemas import JSONEnvelope, UploadedFile
from .tools import Tools

__all__ = [
    "DisallowedFileType",
    "JSONBodyError",
    "JSONEnvelope",
    "JSONErrorKind",
    "NoFilesUploaded",
    "SlugError",
    "SlugErrorKind",
    "ToolkitError",
    "ToolkitSettings",
    "Tools",
    "UploadError",
    "UploadTooLarge",
    "UploadedFile",
    "configure_logging",
    "get_settings",
    "register_error_handlers",
]
