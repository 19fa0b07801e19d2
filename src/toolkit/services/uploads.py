"""Multipart upload storage."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncGenerator
from pathlib import Path, PurePosixPath

from fastapi import Request
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from ..config import ToolkitSettings, get_settings
from ..errors import DisallowedFileType, NoFilesUploaded, UploadError, UploadTooLarge
from ..schemas import UploadedFile
from ..utils.files import SNIFF_LENGTH, create_dir_if_not_exist, sniff_mime_from_bytes
from ..utils.strings import build_upload_name

logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE = 1024 * 1024  # 1 MiB


async def _limited_stream(
    request: Request, max_bytes: int
) -> AsyncGenerator[bytes, None]:
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise UploadTooLarge("the uploaded file is too big")
        yield chunk


def _is_allowed(mime_type: str, allowed_types: list[str]) -> bool:
    if not allowed_types:
        return True
    return any(mime_type.casefold() == allowed.casefold() for allowed in allowed_types)


def _client_file_name(raw: str) -> str:
    # Browsers may send a full client-side path; keep only the last segment
    name = PurePosixPath(raw.replace("\\", "/")).name
    if name in ("", ".", ".."):
        raise UploadError(f"invalid upload file name {raw!r}")
    return name


async def _store_upload(
    upload: UploadFile,
    upload_dir: Path,
    settings: ToolkitSettings,
    rename: bool,
) -> UploadedFile:
    head = await upload.read(SNIFF_LENGTH)
    mime_type = sniff_mime_from_bytes(head)
    if not _is_allowed(mime_type, settings.allowed_file_types):
        logger.warning(
            "Rejected upload %s with disallowed type %s", upload.filename, mime_type
        )
        raise DisallowedFileType(
            "the uploaded file type is not permitted", mime_type=mime_type
        )

    await upload.seek(0)

    original_name = _client_file_name(upload.filename or "")
    new_name = build_upload_name(original_name, rename=rename)
    destination = upload_dir / new_name

    size = 0
    with open(destination, "wb") as outfile:
        while True:
            chunk = await upload.read(_COPY_CHUNK_SIZE)
            if not chunk:
                break
            outfile.write(chunk)
            size += len(chunk)

    logger.info(
        "Stored upload %s as %s (%s, %d bytes)",
        original_name,
        destination,
        mime_type,
        size,
    )
    return UploadedFile(
        original_file_name=original_name,
        new_file_name=new_name,
        file_size=size,
    )


async def upload_files(
    request: Request,
    upload_dir: str | os.PathLike[str],
    settings: ToolkitSettings | None = None,
    *,
    rename: bool = True,
) -> list[UploadedFile]:
    """Store every file part of a multipart request body in ``upload_dir``.

    The directory is created when missing. Each part is sniffed and checked
    against ``settings.allowed_file_types`` before it is written. When
    ``rename`` is true the stored name is random and keeps the original
    extension; otherwise the client's file name is reused.

    Processing stops at the first failing file. The raised ``UploadError``
    lists the files stored before it in ``uploaded_files``; those files stay
    on disk.
    """

    settings = settings or get_settings()
    target_dir = Path(upload_dir)
    create_dir_if_not_exist(target_dir, settings.directory_mode)

    content_type = request.headers.get("content-type", "").lower()
    if not content_type.startswith("multipart/form-data") or (
        "boundary=" not in content_type
    ):
        raise UploadError("request body is not multipart/form-data")

    parser = MultiPartParser(
        request.headers, _limited_stream(request, settings.max_file_size)
    )
    try:
        form = await parser.parse()
    except MultiPartException as exc:
        raise UploadError(f"malformed multipart body: {exc.message}") from exc

    uploaded: list[UploadedFile] = []
    try:
        for _, value in form.multi_items():
            if not isinstance(value, UploadFile) or not value.filename:
                continue
            try:
                stored = await _store_upload(value, target_dir, settings, rename)
            except UploadError as exc:
                exc.uploaded_files = list(uploaded)
                raise
            except OSError as exc:
                raise UploadError(
                    f"failed to store {value.filename}: {exc}",
                    uploaded_files=uploaded,
                    http_status=500,
                ) from exc
            uploaded.append(stored)
    finally:
        await form.close()

    return uploaded


async def upload_one_file(
    request: Request,
    upload_dir: str | os.PathLike[str],
    settings: ToolkitSettings | None = None,
    *,
    rename: bool = True,
) -> UploadedFile:
    """Store the uploaded files and return the first one."""

    files = await upload_files(request, upload_dir, settings, rename=rename)
    if not files:
        raise NoFilesUploaded("no file was uploaded")
    return files[0]


__all__ = ["upload_files", "upload_one_file"]
