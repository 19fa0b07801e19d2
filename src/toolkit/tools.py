"""Facade binding every helper to one resolved settings object."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from fastapi import Request, Response, status
from fastapi.responses import FileResponse

from .config import ToolkitSettings, get_settings
from .schemas import UploadedFile
from .services.downloads import download_static_file
from .services.json_io import error_json, read_json, write_json
from .services.remote import push_json_to_remote
from .services.uploads import upload_files, upload_one_file
from .utils.files import create_dir_if_not_exist
from .utils.strings import random_string, slugify

T = TypeVar("T")


class Tools:
    """Backend chores sharing a single ``ToolkitSettings`` instance.

    The settings are read, never changed. Build a new ``Tools`` with
    different settings to change limits or policies.
    """

    def __init__(self, settings: ToolkitSettings | None = None) -> None:
        self._settings = settings or get_settings()

    @property
    def settings(self) -> ToolkitSettings:
        return self._settings

    def random_string(self, n: int) -> str:
        return random_string(n)

    def create_dir_if_not_exist(self, path: str | os.PathLike[str]) -> None:
        create_dir_if_not_exist(path, self._settings.directory_mode)

    def slugify(self, text: str) -> str:
        return slugify(text)

    def download_static_file(
        self, directory: str | os.PathLike[str], file: str, display_name: str
    ) -> FileResponse:
        return download_static_file(directory, file, display_name)

    async def upload_files(
        self,
        request: Request,
        upload_dir: str | os.PathLike[str],
        *,
        rename: bool = True,
    ) -> list[UploadedFile]:
        return await upload_files(request, upload_dir, self._settings, rename=rename)

    async def upload_one_file(
        self,
        request: Request,
        upload_dir: str | os.PathLike[str],
        *,
        rename: bool = True,
    ) -> UploadedFile:
        return await upload_one_file(
            request, upload_dir, self._settings, rename=rename
        )

    async def read_json(self, request: Request, target: type[T]) -> T:
        return await read_json(request, target, self._settings)

    def write_json(
        self,
        status_code: int,
        data: Any,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        return write_json(status_code, data, headers)

    def error_json(
        self, exc: BaseException, status_code: int = status.HTTP_400_BAD_REQUEST
    ) -> Response:
        return error_json(exc, status_code)

    async def push_json_to_remote(
        self, uri: str, data: Any, client: httpx.AsyncClient | None = None
    ) -> tuple[httpx.Response, int]:
        return await push_json_to_remote(uri, data, client)


__all__ = ["Tools"]
