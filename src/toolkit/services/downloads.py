"""File download responses."""

from __future__ import annotations

import mimetypes
import os
from pathlib import Path

from fastapi import HTTPException
from fastapi.responses import FileResponse


def download_static_file(
    directory: str | os.PathLike[str],
    file: str,
    display_name: str,
) -> FileResponse:
    """Serve ``directory/file`` as an attachment named ``display_name``.

    The ``attachment`` disposition asks browsers to save the file instead of
    rendering it. A missing file raises a 404 ``HTTPException``.
    """

    path = Path(directory) / file
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    media_type = (
        mimetypes.guess_type(display_name)[0]
        or mimetypes.guess_type(path.name)[0]
        or "application/octet-stream"
    )
    headers = {
        "Content-Disposition": f'attachment; filename="{display_name}"',
    }
    return FileResponse(path, media_type=media_type, headers=headers)


__all__ = ["download_static_file"]
