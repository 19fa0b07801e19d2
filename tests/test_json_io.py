"""JSON body reading and response writing."""

from __future__ import annotations

import enum
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest
from conftest import build_request
from pydantic import BaseModel

from toolkit import JSONBodyError, JSONEnvelope, JSONErrorKind, UploadedFile
from toolkit.services.json_io import encode_json, error_json, read_json, write_json


class Foo(BaseModel):
    foo: str = ""


class Inner(BaseModel):
    name: str


class Outer(BaseModel):
    inner: Inner
    count: int = 0


class Holder(BaseModel):
    items: list[Inner] = []
    maybe: Inner | None = None
    mapping: dict[str, Inner] = {}
    pair: tuple[Inner, int] | None = None


@dataclass
class Point:
    x: int
    label: str = ""


@dataclass
class Route:
    points: list[Point] = field(default_factory=list)
    start: Point | None = None


class Colour(enum.Enum):
    RED = "red"


class Profile(BaseModel):
    name: str
    nickname: str | None = None


class Opaque:
    pass


@pytest.mark.asyncio
async def test_read_json_decodes_single_value(make_settings) -> None:
    result = await read_json(build_request(b'{"foo": "bar"}'), Foo, make_settings())

    assert result == Foo(foo="bar")


@pytest.mark.asyncio
async def test_read_json_allows_unknown_fields_when_configured(make_settings) -> None:
    settings = make_settings(allow_unknown_fields=True)

    result = await read_json(build_request(b'{"alpha": "bar"}'), Foo, settings)

    assert result == Foo()


@pytest.mark.asyncio
async def test_read_json_accepts_plain_types(make_settings) -> None:
    result = await read_json(
        build_request(b' [1, 2, 3] \n'), list[int], make_settings()
    )

    assert result == [1, 2, 3]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "kind", "message"),
    [
        (b'{"foo": }', JSONErrorKind.SYNTAX, "body contains badly-formed JSON (at character 8)"),
        (b'{"foo": 1"', JSONErrorKind.SYNTAX, "body contains badly-formed JSON (at character 9)"),
        (b'{alpha: "bar"}', JSONErrorKind.SYNTAX, "body contains badly-formed JSON (at character 1)"),
        (b"hello world", JSONErrorKind.SYNTAX, "body contains badly-formed JSON (at character 0)"),
        (b'{"foo": "bar"', JSONErrorKind.TRUNCATED, "body contains badly-formed JSON"),
        (b'{"foo": "ba', JSONErrorKind.TRUNCATED, "body contains badly-formed JSON"),
        (b'{"foo": 1}', JSONErrorKind.WRONG_TYPE, 'body contains incorrect JSON type for field "foo"'),
        (b"", JSONErrorKind.EMPTY, "body must not be empty"),
        (b"  \n ", JSONErrorKind.EMPTY, "body must not be empty"),
        (b'{"alpha": "bar"}', JSONErrorKind.UNKNOWN_FIELD, 'body contains unknown key "alpha"'),
        (
            b'{"foo": "1"}{"foo": "bar"}',
            JSONErrorKind.MULTIPLE_VALUES,
            "body must contain only one JSON value",
        ),
        (b'{"foo": "1"} trailing', JSONErrorKind.MULTIPLE_VALUES, "body must contain only one JSON value"),
    ],
)
async def test_read_json_classifies_failures(
    make_settings, body: bytes, kind: JSONErrorKind, message: str
) -> None:
    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(build_request(body), Foo, make_settings())

    assert exc_info.value.kind is kind
    assert str(exc_info.value) == message
    assert exc_info.value.http_status == 400


@pytest.mark.asyncio
async def test_read_json_rejects_oversized_body(make_settings) -> None:
    settings = make_settings(max_json_size=5)

    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(build_request(b'{"foo": "bar"}'), Foo, settings)

    assert exc_info.value.kind is JSONErrorKind.TOO_LARGE
    assert str(exc_info.value) == "body must not be larger than 5 bytes"
    assert exc_info.value.http_status == 413


@pytest.mark.asyncio
async def test_read_json_reports_wrong_top_level_type(make_settings) -> None:
    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(build_request(b'["foo"]'), Foo, make_settings())

    assert exc_info.value.kind is JSONErrorKind.WRONG_TYPE
    assert exc_info.value.offset == 7
    assert "at character 7" in str(exc_info.value)


@pytest.mark.asyncio
async def test_read_json_names_nested_fields(make_settings) -> None:
    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(
            build_request(b'{"inner": {"name": "x", "extra": 1}}'), Outer, make_settings()
        )
    assert exc_info.value.kind is JSONErrorKind.UNKNOWN_FIELD
    assert exc_info.value.field == "inner.extra"

    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(build_request(b'{"inner": {"name": 5}}'), Outer, make_settings())
    assert exc_info.value.kind is JSONErrorKind.WRONG_TYPE
    assert exc_info.value.field == "inner.name"


@pytest.mark.asyncio
async def test_read_json_reports_missing_fields(make_settings) -> None:
    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(build_request(b'{"count": 2}'), Outer, make_settings())

    assert exc_info.value.kind is JSONErrorKind.MISSING_FIELD
    assert str(exc_info.value) == 'body is missing required field "inner"'


@pytest.mark.asyncio
async def test_read_json_rejects_invalid_target(make_settings) -> None:
    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(build_request(b"{}"), Opaque, make_settings())

    assert exc_info.value.kind is JSONErrorKind.INVALID_TARGET
    assert str(exc_info.value).startswith("error unmarshaling JSON:")
    assert exc_info.value.http_status == 500


@pytest.mark.asyncio
async def test_read_json_rejects_non_utf8(make_settings) -> None:
    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(build_request(b'{"foo": "\xff"}'), Foo, make_settings())

    assert exc_info.value.kind is JSONErrorKind.SYNTAX
    assert exc_info.value.offset == 9


def test_write_json_round_trips_payload() -> None:
    payload = {"error": False, "message": "foo", "data": {"items": [1, 2]}}

    response = write_json(200, payload)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert json.loads(response.body) == payload


def test_write_json_applies_extra_headers() -> None:
    response = write_json(
        202,
        JSONEnvelope(message="foo"),
        headers={"FOO": "BAR", "Content-Type": "text/plain"},
    )

    assert response.status_code == 202
    assert response.headers["foo"] == "BAR"
    assert response.headers["content-type"] == "application/json"
    assert json.loads(response.body) == {"error": False, "message": "foo"}


def test_write_json_propagates_serialization_errors() -> None:
    with pytest.raises(ValueError):
        write_json(200, {"value": object()})


def test_error_json_wraps_message() -> None:
    response = error_json(RuntimeError("some error"), 503)

    assert response.status_code == 503
    assert json.loads(response.body) == {"error": True, "message": "some error"}


def test_error_json_defaults_to_bad_request() -> None:
    response = error_json(ValueError("nope"))

    assert response.status_code == 400


def test_encode_json_dumps_models() -> None:
    encoded = encode_json(JSONEnvelope(message="ok", data={"id": 1}))

    assert json.loads(encoded) == {"error": False, "message": "ok", "data": {"id": 1}}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "path"),
    [
        (b'{"items": [{"name": "a"}, {"name": "b", "bogus": 1}]}', "items.1.bogus"),
        (b'{"maybe": {"name": "a", "bogus": 1}}', "maybe.bogus"),
        (b'{"mapping": {"k": {"name": "a", "bogus": 1}}}', "mapping.k.bogus"),
        (b'{"pair": [{"name": "a", "bogus": 1}, 2]}', "pair.0.bogus"),
    ],
)
async def test_read_json_rejects_unknown_keys_in_containers(
    make_settings, body: bytes, path: str
) -> None:
    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(build_request(body), Holder, make_settings())

    assert exc_info.value.kind is JSONErrorKind.UNKNOWN_FIELD
    assert exc_info.value.field == path
    assert str(exc_info.value) == f'body contains unknown key "{path}"'


@pytest.mark.asyncio
async def test_read_json_accepts_known_keys_in_containers(make_settings) -> None:
    body = b'{"items": [{"name": "a"}], "maybe": null, "mapping": {"k": {"name": "b"}}}'

    result = await read_json(build_request(body), Holder, make_settings())

    assert result.items == [Inner(name="a")]
    assert result.maybe is None
    assert result.mapping == {"k": Inner(name="b")}


@pytest.mark.asyncio
async def test_read_json_rejects_unknown_keys_in_list_targets(make_settings) -> None:
    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(
            build_request(b'[{"name": "a", "bogus": 1}]'), list[Inner], make_settings()
        )

    assert exc_info.value.field == "0.bogus"


@pytest.mark.asyncio
async def test_read_json_rejects_unknown_keys_in_dataclasses(make_settings) -> None:
    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(build_request(b'{"x": 1, "bogus": 2}'), Point, make_settings())
    assert exc_info.value.kind is JSONErrorKind.UNKNOWN_FIELD
    assert exc_info.value.field == "bogus"

    with pytest.raises(JSONBodyError) as exc_info:
        await read_json(
            build_request(b'{"points": [{"x": 1}], "start": {"x": 2, "y": 3}}'),
            Route,
            make_settings(),
        )
    assert exc_info.value.field == "start.y"


@pytest.mark.asyncio
async def test_read_json_nested_unknown_keys_allowed_when_configured(make_settings) -> None:
    settings = make_settings(allow_unknown_fields=True)

    holder = await read_json(
        build_request(b'{"items": [{"name": "a", "bogus": 1}]}'), Holder, settings
    )
    route = await read_json(
        build_request(b'{"points": [{"x": 1, "bogus": true}]}'), Route, settings
    )

    assert holder.items == [Inner(name="a")]
    assert route == Route(points=[Point(x=1)])


@pytest.mark.asyncio
async def test_read_json_ignores_keys_of_free_form_dicts(make_settings) -> None:
    result = await read_json(
        build_request(b'{"anything": {"goes": 1}}'), dict[str, dict[str, int]], make_settings()
    )

    assert result == {"anything": {"goes": 1}}


def test_encode_json_handles_nested_rich_values() -> None:
    stored = UploadedFile(original_file_name="a.png", new_file_name="b.png", file_size=3)
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    ident = uuid.UUID("12345678-1234-5678-1234-567812345678")

    encoded = encode_json(
        {
            "files": [stored],
            "at": moment,
            "id": ident,
            "colour": Colour.RED,
            "inner": Inner(name="x"),
        }
    )

    assert json.loads(encoded) == {
        "files": [
            {"original_file_name": "a.png", "new_file_name": "b.png", "file_size": 3}
        ],
        "at": moment.isoformat(),
        "id": str(ident),
        "colour": "red",
        "inner": {"name": "x"},
    }


def test_encode_json_omits_unset_model_fields() -> None:
    assert json.loads(encode_json(Profile(name="ada"))) == {"name": "ada"}
    assert json.loads(encode_json(Profile(name="ada", nickname="a"))) == {
        "name": "ada",
        "nickname": "a",
    }


def test_write_json_envelope_with_dataclass_data() -> None:
    stored = UploadedFile(original_file_name="a.png", new_file_name="b.png", file_size=3)

    response = write_json(200, JSONEnvelope(message="ok", data=[stored]))

    assert json.loads(response.body)["data"] == [
        {"original_file_name": "a.png", "new_file_name": "b.png", "file_size": 3}
    ]
