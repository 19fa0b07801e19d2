import pathlib
import sys
from collections.abc import Callable, Iterator

import httpx
import pytest
from starlette.requests import Request

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from toolkit.config import ToolkitSettings, get_settings  # noqa: E402

# 1x1 transparent PNG
TINY_PNG = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x00\x01\x00\x18\xdd\x8d\xb4\x00\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep environment overrides from leaking between tests."""

    for name in (
        "TOOLKIT_MAX_FILE_SIZE",
        "TOOLKIT_ALLOWED_FILE_TYPES",
        "TOOLKIT_MAX_JSON_SIZE",
        "TOOLKIT_ALLOW_UNKNOWN_FIELDS",
        "TOOLKIT_DIRECTORY_MODE",
        "TOOLKIT_LOG_LEVEL",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_settings() -> Callable[..., ToolkitSettings]:
    def factory(**overrides) -> ToolkitSettings:
        return ToolkitSettings(_env_file=None, **overrides)

    return factory


def build_request(body: bytes, content_type: str = "application/json") -> Request:
    """Return a POST request whose body arrives in a single ASGI message."""

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "query_string": b"",
        "headers": [(b"content-type", content_type.encode("latin-1"))],
    }
    messages = [{"type": "http.request", "body": body, "more_body": False}]

    async def receive() -> dict:
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return Request(scope, receive)


def build_multipart_request(files: list[tuple[str, tuple[str, bytes, str]]]) -> Request:
    """Encode ``files`` the way an HTTP client would and wrap them in a request."""

    encoded = httpx.Request("POST", "http://testserver/", files=files)
    return build_request(encoded.read(), encoded.headers["content-type"])
