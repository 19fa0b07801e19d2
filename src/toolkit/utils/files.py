"""Filesystem and content-type helpers."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..config import DEFAULT_DIRECTORY_MODE

logger = logging.getLogger(__name__)

SNIFF_LENGTH = 512

OCTET_STREAM = "application/octet-stream"
PLAIN_TEXT = "text/plain; charset=utf-8"

# Bytes that never appear in text content
_BINARY_BYTES = frozenset(
    [*range(0x00, 0x09), 0x0B, 0x0E, 0x0F, *range(0x10, 0x1C), 0x1F]
)

_HTML_PREFIXES = (
    b"<!doctype html",
    b"<html",
    b"<head",
    b"<script",
    b"<iframe",
    b"<h1",
    b"<div",
    b"<font",
    b"<table",
    b"<a",
    b"<style",
    b"<title",
    b"<b",
    b"<body",
    b"<br",
    b"<p",
    b"<!--",
)


def create_dir_if_not_exist(
    path: str | os.PathLike[str], mode: int = DEFAULT_DIRECTORY_MODE
) -> None:
    """Create ``path`` and any missing parents when it does not exist yet.

    An existing path is left alone, even when it is not a directory.
    """

    target = Path(path)
    if target.exists():
        return
    # makedirs applies the mode to every directory it creates
    os.makedirs(target, mode=mode, exist_ok=True)
    logger.debug("Created directory %s", target)


def _looks_like_html(data: bytes) -> bool:
    head = data.lstrip(b"\t\n\x0c\r ").lower()
    for prefix in _HTML_PREFIXES:
        if head.startswith(prefix):
            rest = head[len(prefix) : len(prefix) + 1]
            if prefix == b"<!--" or rest in (b" ", b">"):
                return True
    return False


def sniff_mime_from_bytes(data: bytes) -> str:
    """Guess a MIME type from the leading bytes of ``data``.

    Only the first ``SNIFF_LENGTH`` bytes are considered. Unrecognised
    content is reported as plain text when it holds no binary control bytes
    and as ``application/octet-stream`` otherwise.
    """

    data = data[:SNIFF_LENGTH]
    if not data:
        return PLAIN_TEXT

    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if data.startswith(b"GIF87a") or data.startswith(b"GIF89a"):
        return "image/gif"
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "image/webp"
    if data.startswith(b"RIFF") and data[8:12] == b"WAVE":
        return "audio/wave"
    if data.startswith(b"BM"):
        return "image/bmp"
    if data.startswith(b"\x00\x00\x01\x00") or data.startswith(b"\x00\x00\x02\x00"):
        return "image/x-icon"
    if data.startswith(b"%PDF-"):
        return "application/pdf"
    if data.startswith(b"PK\x03\x04"):
        return "application/zip"
    if data.startswith(b"\x1f\x8b\x08"):
        return "application/x-gzip"
    if data.startswith(b"OggS\x00"):
        return "application/ogg"
    if data.startswith(b"ID3"):
        return "audio/mpeg"
    if data[4:8] == b"ftyp" and data[8:11] != b"hei":
        return "video/mp4"
    if data.startswith(b"wOFF"):
        return "font/woff"
    if data.startswith(b"wOF2"):
        return "font/woff2"

    if _looks_like_html(data):
        return "text/html; charset=utf-8"
    if data.lstrip(b"\t\n\x0c\r ").startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    if data.startswith(b"\xef\xbb\xbf"):
        return PLAIN_TEXT
    if any(byte in _BINARY_BYTES for byte in data):
        return OCTET_STREAM
    return PLAIN_TEXT


__all__ = [
    "OCTET_STREAM",
    "PLAIN_TEXT",
    "SNIFF_LENGTH",
    "create_dir_if_not_exist",
    "sniff_mime_from_bytes",
]
