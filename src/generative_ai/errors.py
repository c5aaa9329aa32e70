"""Exception hierarchy for the Generative Language client."""

from __future__ import annotations

_PREVIEW_LIMIT = 80


def _preview(text: str) -> str:
    return text if len(text) <= _PREVIEW_LIMIT else f"{text[:_PREVIEW_LIMIT]}..."


class GenerativeAIError(Exception):
    """Base class for every error raised by this package."""


class DecodeError(GenerativeAIError):
    """A wire value could not be decoded into a typed object.

    Not a ``ValueError`` subclass, so it passes through pydantic validators
    unchanged instead of being folded into a ``ValidationError``.
    """


class NotAnObjectError(DecodeError):
    """A part was expected to be a JSON object."""

    def __init__(self, value: object) -> None:
        self.kind = type(value).__name__
        super().__init__(f"Expected a JSON object for a content part, got {self.kind}")


class UnknownPartShapeError(DecodeError):
    """A part object carried none of the known discriminator keys."""

    def __init__(self, keys: list[str]) -> None:
        self.keys = keys
        super().__init__(f"Unknown content part shape with keys {keys!r}")


class MalformedFieldError(DecodeError):
    """A discriminator key matched but its value has the wrong structure."""

    def __init__(self, field: str, reason: str | None = None) -> None:
        self.field = field
        self.reason = reason
        message = f"Malformed field '{field}'"
        super().__init__(f"{message}: {reason}" if reason else message)


class MalformedEventError(DecodeError):
    """One stream event payload could not be decoded."""

    def __init__(self, payload: str, reason: str) -> None:
        self.payload = payload
        self.reason = reason
        super().__init__(f"Malformed stream event ({reason}): {_preview(payload)!r}")


class TruncatedStreamError(DecodeError):
    """The stream ended with an incomplete event still buffered."""

    def __init__(self, fragment: str) -> None:
        self.fragment = fragment
        super().__init__(f"Stream ended mid-event, discarded {len(fragment)} characters: {_preview(fragment)!r}")


class ConfigurationError(GenerativeAIError):
    """Client configuration is missing or invalid."""


class TransportError(GenerativeAIError):
    """The HTTP request could not be completed."""


class ApiError(GenerativeAIError):
    """The API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str, body: object = None) -> None:
        self.status_code = status_code
        self.message = message
        self.body = body
        super().__init__(f"[{status_code}] {message}")


__all__ = [
    "ApiError",
    "ConfigurationError",
    "DecodeError",
    "GenerativeAIError",
    "MalformedEventError",
    "MalformedFieldError",
    "NotAnObjectError",
    "TransportError",
    "TruncatedStreamError",
    "UnknownPartShapeError",
]
