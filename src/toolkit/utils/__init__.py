"""Utility helpers shared by the toolkit services."""

from .files import create_dir_if_not_exist, sniff_mime_from_bytes
from .strings import build_upload_name, file_extension, random_string, slugify

__all__ = [
    "build_upload_name",
    "create_dir_if_not_exist",
    "file_extension",
    "random_string",
    "slugify",
    "sniff_mime_from_bytes",
]
