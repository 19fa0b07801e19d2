"""Global exception handler turning toolkit errors into JSON envelopes."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import Response

from .errors import ToolkitError
from .tools import Tools

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI, tools: Tools | None = None) -> None:
    """Answer every uncaught ``ToolkitError`` with the JSON error envelope."""

    tools = tools or Tools()

    @app.exception_handler(ToolkitError)
    async def toolkit_error_handler(request: Request, exc: ToolkitError) -> Response:
        logger.warning(
            "%s on %s: %s", type(exc).__name__, request.url.path, exc.message
        )
        return tools.error_json(exc, exc.http_status)


__all__ = ["register_error_handlers"]
