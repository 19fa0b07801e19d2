"""String helpers: random tokens, slugs and upload names."""

from __future__ import annotations

import re
import secrets
from pathlib import PurePosixPath

from ..errors import SlugError, SlugErrorKind

RANDOM_STRING_SOURCE = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_+"
)
UPLOAD_NAME_LENGTH = 25

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def random_string(n: int) -> str:
    """Return ``n`` characters drawn uniformly from ``RANDOM_STRING_SOURCE``.

    Characters come from :mod:`secrets`, so the result is suitable for
    unguessable file names and tokens. A negative ``n`` raises ``ValueError``.
    """

    if n < 0:
        raise ValueError(f"random string length must not be negative, got {n}")
    return "".join(secrets.choice(RANDOM_STRING_SOURCE) for _ in range(n))


def slugify(text: str) -> str:
    """Turn ``text`` into a lowercase, hyphen-separated, url-safe token.

    Parameters
    ----------
    text:
        Arbitrary input. Non-ASCII letters are dropped rather than
        transliterated.

    Returns
    -------
    str
        The slug, never empty.

    Raises
    ------
    SlugError
        ``EMPTY_INPUT`` for an empty string, ``EMPTY_RESULT`` when nothing
        url-safe is left after the transformation.
    """

    if not text:
        raise SlugError("empty string not permitted", SlugErrorKind.EMPTY_INPUT)

    slug = _NON_SLUG.sub("-", text.lower()).strip("-")
    if not slug:
        raise SlugError(
            "after removing unsafe characters, slug is zero length",
            SlugErrorKind.EMPTY_RESULT,
        )
    return slug


def file_extension(filename: str) -> str:
    """Return the text from the last dot of the final path segment, or "".

    Dotfiles keep their whole name as the extension, so ``.env`` gives
    ``.env`` where ``PurePath.suffix`` would give nothing.
    """

    base = PurePosixPath(filename.replace("\\", "/")).name
    dot = base.rfind(".")
    return base[dot:] if dot != -1 else ""


def build_upload_name(original_filename: str, *, rename: bool) -> str:
    """Construct the stored filename for an upload.

    Renamed uploads get a random name of ``UPLOAD_NAME_LENGTH`` characters
    that keeps the original extension as ``file_extension`` reports it.
    Otherwise the original name is reused verbatim; collisions overwrite.
    """

    if not rename:
        return original_filename
    return f"{random_string(UPLOAD_NAME_LENGTH)}{file_extension(original_filename)}"


__all__ = [
    "RANDOM_STRING_SOURCE",
    "UPLOAD_NAME_LENGTH",
    "build_upload_name",
    "file_extension",
    "random_string",
    "slugify",
]
