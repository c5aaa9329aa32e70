"""Load local files as inline-data parts."""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path

from generative_ai.parts import InlineDataPart

MULTIMODAL_PREFIXES: tuple[str, ...] = ("image/", "audio/", "video/", "application/pdf", "text/")


def read_media_file(media_path: Path | str, *, allowed_prefixes: tuple[str, ...] | None = None) -> InlineDataPart:
    """Read a file and wrap its base64-encoded bytes in an :class:`InlineDataPart`."""
    resolved_path = Path(media_path)
    if not resolved_path.is_file():
        message = f"Media file not found: {resolved_path}"
        raise FileNotFoundError(message)

    mime_type, _ = mimetypes.guess_type(resolved_path)
    prefixes = allowed_prefixes or MULTIMODAL_PREFIXES
    if mime_type is None or not mime_type.startswith(prefixes):
        message = f"Unsupported media type for file: {resolved_path}"
        raise ValueError(message)

    encoded = base64.b64encode(resolved_path.read_bytes()).decode("ascii")
    return InlineDataPart(mime_type=mime_type, data=encoded)


def read_image_file(image_path: Path | str) -> InlineDataPart:
    return read_media_file(image_path, allowed_prefixes=("image/",))
