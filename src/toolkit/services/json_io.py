"""Reading JSON request bodies and writing JSON responses."""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import (
    Mapping,
    MutableMapping,
    MutableSequence,
    MutableSet,
    Sequence,
    Set,
)
from types import UnionType
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin, get_type_hints

from fastapi import Request, Response, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError, PydanticUserError

from ..config import ToolkitSettings, get_settings
from ..errors import JSONBodyError, JSONErrorKind
from ..schemas import JSONEnvelope

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WHITESPACE = " \t\n\r"
_decoder = json.JSONDecoder()

_MAPPING_ORIGINS = (dict, Mapping, MutableMapping)
_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    Sequence,
    MutableSequence,
    Set,
    MutableSet,
)


async def _read_limited_body(request: Request, max_bytes: int) -> bytes:
    chunks: list[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_bytes:
            raise JSONBodyError(
                f"body must not be larger than {max_bytes} bytes",
                JSONErrorKind.TOO_LARGE,
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index] in _WHITESPACE:
        index += 1
    return index


def _decode_first_value(text: str) -> tuple[Any, int, int]:
    """Decode the first JSON value; return it with its start and end offsets."""

    start = _skip_whitespace(text, 0)
    if start == len(text):
        raise JSONBodyError("body must not be empty", JSONErrorKind.EMPTY)
    try:
        value, end = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        if exc.pos >= len(text.rstrip(_WHITESPACE)) or exc.msg.startswith(
            "Unterminated string"
        ):
            raise JSONBodyError(
                "body contains badly-formed JSON",
                JSONErrorKind.TRUNCATED,
                offset=exc.pos,
            ) from exc
        raise JSONBodyError(
            f"body contains badly-formed JSON (at character {exc.pos})",
            JSONErrorKind.SYNTAX,
            offset=exc.pos,
        ) from exc
    return value, start, end


def _is_model(target: Any) -> bool:
    # Parametrized generics such as list[int] can pass isinstance(type) yet fail issubclass
    try:
        return isinstance(target, type) and issubclass(target, BaseModel)
    except TypeError:
        return False


def _fields_of(annotation: Any) -> dict[str, Any] | None:
    """Map the keys a model or dataclass accepts to their annotations."""

    if _is_model(annotation):
        fields: dict[str, Any] = {}
        for name, field in annotation.model_fields.items():
            fields[name] = field.annotation
            if isinstance(field.alias, str):
                fields[field.alias] = field.annotation
            if isinstance(field.validation_alias, str):
                fields[field.validation_alias] = field.annotation
        return fields
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        hints = get_type_hints(annotation)
        return {
            field.name: hints.get(field.name, Any)
            for field in dataclasses.fields(annotation)
        }
    return None


def _accepts_shape(annotation: Any, value: Any) -> bool:
    origin = get_origin(annotation) or annotation
    if origin is Annotated:
        return _accepts_shape(get_args(annotation)[0], value)
    if isinstance(value, dict):
        return _fields_of(annotation) is not None or origin in _MAPPING_ORIGINS
    if isinstance(value, list):
        return origin in _SEQUENCE_ORIGINS
    return False


def _find_unknown_key(annotation: Any, value: Any, prefix: str = "") -> str | None:
    """Return the dotted path of the first key ``annotation`` does not declare."""

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        return _find_unknown_key(args[0], value, prefix)

    if origin is Union or origin is UnionType:
        found: str | None = None
        for member in args:
            if not _accepts_shape(member, value):
                continue
            unknown = _find_unknown_key(member, value, prefix)
            if unknown is None:
                return None
            found = found or unknown
        return found

    fields = _fields_of(annotation)
    if fields is not None:
        if not isinstance(value, dict):
            return None
        for key, item in value.items():
            if key not in fields:
                return f"{prefix}{key}"
            nested = _find_unknown_key(fields[key], item, f"{prefix}{key}.")
            if nested is not None:
                return nested
        return None

    if origin in _MAPPING_ORIGINS and isinstance(value, dict) and len(args) == 2:
        for key, item in value.items():
            nested = _find_unknown_key(args[1], item, f"{prefix}{key}.")
            if nested is not None:
                return nested
        return None

    if origin in _SEQUENCE_ORIGINS and isinstance(value, list) and args:
        variadic = origin is not tuple or (len(args) == 2 and args[1] is Ellipsis)
        for index, item in enumerate(value):
            if not variadic and index >= len(args):
                break
            item_type = args[0] if variadic else args[index]
            nested = _find_unknown_key(item_type, item, f"{prefix}{index}.")
            if nested is not None:
                return nested

    return None


def _format_loc(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)


def _validation_failure(exc: ValidationError, end: int) -> JSONBodyError:
    first = exc.errors()[0]
    field = _format_loc(first["loc"])
    if first["type"] == "missing":
        return JSONBodyError(
            f'body is missing required field "{field}"',
            JSONErrorKind.MISSING_FIELD,
            field=field,
        )
    if first["type"] == "extra_forbidden":
        return JSONBodyError(
            f'body contains unknown key "{field}"',
            JSONErrorKind.UNKNOWN_FIELD,
            field=field,
        )
    if field:
        return JSONBodyError(
            f'body contains incorrect JSON type for field "{field}"',
            JSONErrorKind.WRONG_TYPE,
            field=field,
        )
    return JSONBodyError(
        f"body contains incorrect JSON type (at character {end})",
        JSONErrorKind.WRONG_TYPE,
        offset=end,
    )


async def read_json(
    request: Request,
    target: type[T],
    settings: ToolkitSettings | None = None,
) -> T:
    """Read exactly one JSON value from the request body into ``target``.

    ``target`` is any type pydantic can validate: a model, a dataclass,
    ``dict[str, Any]`` and so on. Values are validated in strict mode, so a
    number never silently becomes a string. Unknown keys are rejected at any
    depth of a model or dataclass, including models held in lists, dicts
    and optional fields, unless ``settings.allow_unknown_fields`` is set.

    Every failure is raised as a ``JSONBodyError`` with a readable message
    and a ``JSONErrorKind`` naming the cause.
    """

    settings = settings or get_settings()
    raw = await _read_limited_body(request, settings.max_json_size)

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise JSONBodyError(
            f"body contains badly-formed JSON (at character {exc.start})",
            JSONErrorKind.SYNTAX,
            offset=exc.start,
        ) from exc

    value, start, end = _decode_first_value(text)

    try:
        adapter = TypeAdapter(target)
    except (PydanticSchemaGenerationError, PydanticUserError, TypeError) as exc:
        raise JSONBodyError(
            f"error unmarshaling JSON: {exc}", JSONErrorKind.INVALID_TARGET
        ) from exc

    if not settings.allow_unknown_fields:
        unknown = _find_unknown_key(target, value)
        if unknown is not None:
            raise JSONBodyError(
                f'body contains unknown key "{unknown}"',
                JSONErrorKind.UNKNOWN_FIELD,
                field=unknown,
            )

    try:
        result = adapter.validate_json(text[start:end], strict=True)
    except ValidationError as exc:
        raise _validation_failure(exc, end) from exc

    if _skip_whitespace(text, end) != len(text):
        raise JSONBodyError(
            "body must contain only one JSON value", JSONErrorKind.MULTIPLE_VALUES
        )

    return result


def encode_json(data: Any) -> bytes:
    """Serialize ``data`` to UTF-8 JSON.

    Anything ``jsonable_encoder`` understands is accepted, so models,
    dataclasses, datetimes, UUIDs and enums may sit anywhere inside ``data``.
    A top-level model drops its ``None`` fields; an envelope drops ``data``
    only when it is ``None``.
    """

    if isinstance(data, JSONEnvelope):
        data = data.to_wire()
    payload = jsonable_encoder(data, exclude_none=isinstance(data, BaseModel))
    return json.dumps(payload).encode("utf-8")


def write_json(
    status_code: int,
    data: Any,
    headers: Mapping[str, str] | None = None,
) -> Response:
    """Serialize ``data`` into a JSON response with ``status_code``.

    Extra ``headers`` are applied first and may overwrite each other; the
    content type is always ``application/json``. Serialization errors
    propagate to the caller.
    """

    body = encode_json(data)

    response = Response(content=body, status_code=status_code)
    for key, value in (headers or {}).items():
        response.headers[key] = value
    response.headers["Content-Type"] = "application/json"
    return response


def error_json(
    exc: BaseException,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> Response:
    """Send ``exc`` to the client inside an error envelope."""

    payload = JSONEnvelope(error=True, message=str(exc))
    logger.debug("Sending error response %d: %s", status_code, payload.message)
    return write_json(status_code, payload)


__all__ = ["encode_json", "error_json", "read_json", "write_json"]
