"""Records returned by the toolkit helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel


@dataclass(frozen=True)
class UploadedFile:
    """A file stored by the upload helpers."""

    original_file_name: str
    new_file_name: str
    file_size: int


class JSONEnvelope(BaseModel):
    """Response payload shared by every JSON reply.

    ``data`` is dropped from the wire form when it is ``None``.
    """

    error: bool = False
    message: str = ""
    data: Any | None = None

    def to_wire(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json")
        if self.data is None:
            payload.pop("data")
        return payload


__all__ = ["JSONEnvelope", "UploadedFile"]
