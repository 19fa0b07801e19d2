"""Typed errors raised by the toolkit helpers.

Every error carries the HTTP status a handler should answer with. Slug and
JSON body errors also carry a ``kind`` so callers can branch on the cause
without inspecting message text.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas import UploadedFile


class ToolkitError(RuntimeError):
    """Base error raised by toolkit helpers."""

    http_status: int = 400

    def __init__(self, message: str, *, http_status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status


class SlugErrorKind(str, Enum):
    EMPTY_INPUT = "empty_input"
    EMPTY_RESULT = "empty_result"


class SlugError(ToolkitError):
    """Raised when text cannot be turned into a slug."""

    def __init__(self, message: str, kind: SlugErrorKind) -> None:
        super().__init__(message)
        self.kind = kind


class UploadError(ToolkitError):
    """Base error for multipart upload failures.

    ``uploaded_files`` holds the files stored before the failure. They are
    left on disk.
    """

    def __init__(
        self,
        message: str,
        *,
        uploaded_files: list[UploadedFile] | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message, http_status=http_status)
        self.uploaded_files: list[UploadedFile] = list(uploaded_files or [])


class UploadTooLarge(UploadError):
    """Raised when the multipart body exceeds the configured size."""

    http_status = 413


class DisallowedFileType(UploadError):
    """Raised when a sniffed MIME type is not in the allow-list."""

    http_status = 415

    def __init__(
        self,
        message: str,
        *,
        mime_type: str,
        uploaded_files: list[UploadedFile] | None = None,
    ) -> None:
        super().__init__(message, uploaded_files=uploaded_files)
        self.mime_type = mime_type


class NoFilesUploaded(UploadError):
    """Raised when a single upload was requested but the body held no file."""


class JSONErrorKind(str, Enum):
    SYNTAX = "syntax"
    TRUNCATED = "truncated"
    WRONG_TYPE = "wrong_type"
    MISSING_FIELD = "missing_field"
    EMPTY = "empty"
    UNKNOWN_FIELD = "unknown_field"
    TOO_LARGE = "too_large"
    INVALID_TARGET = "invalid_target"
    MULTIPLE_VALUES = "multiple_values"


_JSON_STATUS = {
    JSONErrorKind.TOO_LARGE: 413,
    JSONErrorKind.INVALID_TARGET: 500,
}


class JSONBodyError(ToolkitError):
    """Raised when a request body cannot be read as a single JSON value."""

    def __init__(
        self,
        message: str,
        kind: JSONErrorKind,
        *,
        offset: int | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(message, http_status=_JSON_STATUS.get(kind, 400))
        self.kind = kind
        self.offset = offset
        self.field = field


__all__ = [
    "DisallowedFileType",
    "JSONBodyError",
    "JSONErrorKind",
    "NoFilesUploaded",
    "SlugError",
    "SlugErrorKind",
    "ToolkitError",
    "UploadError",
    "UploadTooLarge",
]
