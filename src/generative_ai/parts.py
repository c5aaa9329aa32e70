"""Content parts and their JSON wire codec.

A part on the wire is an object carrying exactly one discriminator key. There is
no explicit type tag, so :func:`decode_part` probes the keys in a fixed order and
returns the first variant that matches.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, JsonValue

from generative_ai.errors import MalformedFieldError, NotAnObjectError, UnknownPartShapeError


class _PartBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TextPart(_PartBase):
    """Plain text."""

    text: str


class InlineDataPart(_PartBase):
    """Binary data carried inline as base64."""

    mime_type: str
    data: str


class FunctionCallPart(_PartBase):
    """A function call predicted by the model."""

    name: str
    args: dict[str, JsonValue]


class FunctionResponsePart(_PartBase):
    """The result of a function call, sent back to the model."""

    name: str
    response: dict[str, JsonValue]


class FileDataPart(_PartBase):
    """A reference to a file uploaded through the Files API."""

    mime_type: str
    file_uri: str


Part = TextPart | InlineDataPart | FunctionCallPart | FunctionResponsePart | FileDataPart

PART_TYPES: tuple[type[_PartBase], ...] = (
    TextPart,
    InlineDataPart,
    FunctionCallPart,
    FunctionResponsePart,
    FileDataPart,
)


def encode_part(part: Part) -> dict[str, JsonValue]:
    """Return the wire object for ``part``."""
    if isinstance(part, TextPart):
        return {"text": part.text}
    if isinstance(part, InlineDataPart):
        return {"inlineData": {"mimeType": part.mime_type, "data": part.data}}
    if isinstance(part, FunctionCallPart):
        return {"functionCall": {"name": part.name, "args": dict(part.args)}}
    if isinstance(part, FunctionResponsePart):
        return {"functionResponse": {"name": part.name, "response": dict(part.response)}}
    if isinstance(part, FileDataPart):
        return {"fileData": {"mimeType": part.mime_type, "fileUri": part.file_uri}}
    message = f"Unsupported part type: {type(part).__name__}"
    raise TypeError(message)


def decode_part(value: object) -> Part:
    """Decode a wire object into a :data:`Part`.

    Raises:
        NotAnObjectError: ``value`` is not a JSON object.
        MalformedFieldError: the matched discriminator holds a malformed value.
        UnknownPartShapeError: none of the discriminator keys is present.
    """
    if not isinstance(value, Mapping):
        raise NotAnObjectError(value)
    obj = cast("Mapping[str, object]", value)
    for key, decoder in _DECODERS:
        if key in obj:
            return decoder(obj[key])
    raise UnknownPartShapeError(sorted(str(key) for key in obj))


def _require_object(field: str, value: object) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise MalformedFieldError(field, f"expected an object, got {type(value).__name__}")
    return cast("Mapping[str, object]", value)


def _require_string(field: str, obj: Mapping[str, object], key: str) -> str:
    path = f"{field}.{key}"
    if key not in obj:
        raise MalformedFieldError(path, "missing")
    value = obj[key]
    if not isinstance(value, str):
        raise MalformedFieldError(path, f"expected a string, got {type(value).__name__}")
    return value


def _require_mapping(field: str, obj: Mapping[str, object], key: str) -> dict[str, JsonValue]:
    path = f"{field}.{key}"
    if key not in obj:
        raise MalformedFieldError(path, "missing")
    return dict(cast("Mapping[str, JsonValue]", _require_object(path, obj[key])))


def _decode_text(value: object) -> TextPart:
    if not isinstance(value, str):
        raise MalformedFieldError("text", f"expected a string, got {type(value).__name__}")
    return TextPart(text=value)


def _decode_inline_data(value: object) -> InlineDataPart:
    blob = _require_object("inlineData", value)
    return InlineDataPart(
        mime_type=_require_string("inlineData", blob, "mimeType"),
        data=_require_string("inlineData", blob, "data"),
    )


def _decode_function_call(value: object) -> FunctionCallPart:
    call = _require_object("functionCall", value)
    return FunctionCallPart(
        name=_require_string("functionCall", call, "name"),
        args=_require_mapping("functionCall", call, "args"),
    )


def _decode_function_response(value: object) -> FunctionResponsePart:
    result = _require_object("functionResponse", value)
    return FunctionResponsePart(
        name=_require_string("functionResponse", result, "name"),
        response=_require_mapping("functionResponse", result, "response"),
    )


def _decode_file_data(value: object) -> FileDataPart:
    file_data = _require_object("fileData", value)
    return FileDataPart(
        mime_type=_require_string("fileData", file_data, "mimeType"),
        file_uri=_require_string("fileData", file_data, "fileUri"),
    )


# Lookup order is part of the wire contract: the first present key wins.
_DECODERS: tuple[tuple[str, Callable[[object], Part]], ...] = (
    ("text", _decode_text),
    ("inlineData", _decode_inline_data),
    ("functionCall", _decode_function_call),
    ("functionResponse", _decode_function_response),
    ("fileData", _decode_file_data),
)

DISCRIMINATOR_KEYS: tuple[str, ...] = tuple(key for key, _ in _DECODERS)
