from __future__ import annotations

import typer

from generative_ai.models import Content
from generative_ai.parts import Part, TextPart

MISSING_HISTORY_FORMAT_ERROR = "History entries must use the 'role:text' format."


def parse_history(history: list[str]) -> list[Content]:
    """Convert ``role:text`` strings into content turns."""
    turns: list[Content] = []
    for entry in history:
        role, separator, text = entry.partition(":")
        if not separator or not role.strip():
            raise typer.BadParameter(MISSING_HISTORY_FORMAT_ERROR)
        turns.append(Content(role=role.strip(), parts=[TextPart(text=text.strip())]))
    return turns


def build_contents(parts: list[Part], history: list[str]) -> list[Content]:
    """Append the current user turn to the parsed history."""
    return [*parse_history(history), Content.user(*parts)]
