from __future__ import annotations

import pytest

from generative_ai.errors import DecodeError, MalformedFieldError, NotAnObjectError, UnknownPartShapeError
from generative_ai.parts import (
    DISCRIMINATOR_KEYS,
    FileDataPart,
    FunctionCallPart,
    FunctionResponsePart,
    InlineDataPart,
    Part,
    TextPart,
    decode_part,
    encode_part,
)


@pytest.mark.parametrize(
    ("part", "wire"),
    [
        (TextPart(text="hi"), {"text": "hi"}),
        (
            InlineDataPart(mime_type="image/png", data="AAAA"),
            {"inlineData": {"mimeType": "image/png", "data": "AAAA"}},
        ),
        (
            FunctionCallPart(name="lookup", args={"city": "Paris", "days": 3}),
            {"functionCall": {"name": "lookup", "args": {"city": "Paris", "days": 3}}},
        ),
        (
            FunctionResponsePart(name="lookup", response={"temperature": 21.5}),
            {"functionResponse": {"name": "lookup", "response": {"temperature": 21.5}}},
        ),
        (
            FileDataPart(mime_type="application/pdf", file_uri="https://example.test/f/1"),
            {"fileData": {"mimeType": "application/pdf", "fileUri": "https://example.test/f/1"}},
        ),
    ],
)
def test_encode_and_decode_each_variant(part: Part, wire: dict[str, object]) -> None:
    """Every variant maps to a single-key object and back."""
    assert encode_part(part) == wire
    assert decode_part(wire) == part


def test_decode_text_part_keeps_empty_string() -> None:
    """An empty string is still a text part."""
    assert decode_part({"text": ""}) == TextPart(text="")


def test_decode_prefers_first_discriminator_in_key_order() -> None:
    """When several keys are present the earliest one in probe order wins."""
    wire = {
        "functionCall": {"name": "f", "args": {}},
        "text": "wins",
        "inlineData": {"mimeType": "text/plain", "data": ""},
    }

    assert decode_part(wire) == TextPart(text="wins")
    assert DISCRIMINATOR_KEYS == ("text", "inlineData", "functionCall", "functionResponse", "fileData")


def test_decode_ignores_unrelated_keys_beside_discriminator() -> None:
    """Extra keys next to a known discriminator do not affect decoding."""
    assert decode_part({"thought": True, "text": "ok"}) == TextPart(text="ok")


def test_decode_unknown_shape_lists_keys() -> None:
    """An object without any discriminator is rejected with its keys."""
    with pytest.raises(UnknownPartShapeError) as excinfo:
        decode_part({"video": {}, "audio": 1})

    assert excinfo.value.keys == ["audio", "video"]


def test_decode_empty_object_is_unknown_shape() -> None:
    """An empty object carries no discriminator."""
    with pytest.raises(UnknownPartShapeError):
        decode_part({})


@pytest.mark.parametrize("value", ["text", 3, None, ["text"]])
def test_decode_rejects_non_objects(value: object) -> None:
    """Only JSON objects can be parts."""
    with pytest.raises(NotAnObjectError) as excinfo:
        decode_part(value)

    assert excinfo.value.kind == type(value).__name__


@pytest.mark.parametrize(
    ("wire", "field"),
    [
        ({"text": 5}, "text"),
        ({"inlineData": "AAAA"}, "inlineData"),
        ({"inlineData": {"data": "AAAA"}}, "inlineData.mimeType"),
        ({"inlineData": {"mimeType": "image/png", "data": 7}}, "inlineData.data"),
        ({"functionCall": {"args": {}}}, "functionCall.name"),
        ({"functionCall": {"name": "f"}}, "functionCall.args"),
        ({"functionCall": {"name": "f", "args": [1]}}, "functionCall.args"),
        ({"functionResponse": {"name": "f", "response": "done"}}, "functionResponse.response"),
        ({"fileData": {"mimeType": "text/plain"}}, "fileData.fileUri"),
    ],
)
def test_decode_reports_malformed_field(wire: dict[str, object], field: str) -> None:
    """A matched discriminator with a bad value names the offending field."""
    with pytest.raises(MalformedFieldError) as excinfo:
        decode_part(wire)

    assert excinfo.value.field == field


def test_malformed_text_is_not_retried_as_other_variant() -> None:
    """A malformed earlier discriminator fails instead of falling through."""
    with pytest.raises(MalformedFieldError, match="text"):
        decode_part({"text": None, "fileData": {"mimeType": "text/plain", "fileUri": "u"}})


def test_decode_errors_share_a_base_class() -> None:
    """Callers can catch every codec failure through DecodeError."""
    assert issubclass(NotAnObjectError, DecodeError)
    assert issubclass(UnknownPartShapeError, DecodeError)
    assert issubclass(MalformedFieldError, DecodeError)
    assert not issubclass(DecodeError, ValueError)


def test_encode_rejects_foreign_objects() -> None:
    """Objects that are not parts cannot be encoded."""
    with pytest.raises(TypeError, match="Unsupported part type"):
        encode_part("text")  # type: ignore[arg-type]
