"""Posting JSON payloads to remote services."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .json_io import encode_json

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


async def push_json_to_remote(
    uri: str,
    data: Any,
    client: httpx.AsyncClient | None = None,
) -> tuple[httpx.Response, int]:
    """POST ``data`` as JSON to ``uri`` and return the response and status code.

    A caller-supplied ``client`` is used as-is and left open. Otherwise a
    fresh client handles the single request; the response body has already
    been read when it is returned. Transport errors propagate unchanged and
    nothing is retried.
    """

    payload = encode_json(data)

    if client is not None:
        response = await client.post(uri, content=payload, headers=_JSON_HEADERS)
    else:
        async with httpx.AsyncClient() as fresh_client:
            response = await fresh_client.post(
                uri, content=payload, headers=_JSON_HEADERS
            )

    logger.debug(
        "Pushed %d bytes of JSON to %s: %d", len(payload), uri, response.status_code
    )
    return response, response.status_code


__all__ = ["push_json_to_remote"]
