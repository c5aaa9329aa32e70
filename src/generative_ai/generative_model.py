"""A model handle that builds requests and calls ``generateContent``."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, TypeAlias, cast

from generative_ai.errors import MalformedFieldError
from generative_ai.logger import BaseComponent
from generative_ai.models import (
    Content,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerationConfig,
    SafetySetting,
    Task,
    Tool,
    ToolConfig,
    decode_content,
)
from generative_ai.parts import DISCRIMINATOR_KEYS, PART_TYPES, Part, TextPart, decode_part
from generative_ai.stream import EventStreamReader

if TYPE_CHECKING:
    from generative_ai.transport import RequestDispatcher

ContentInput: TypeAlias = Content | Mapping[str, object]
PartInput: TypeAlias = Part | str | Mapping[str, object]
ContentsType: TypeAlias = str | Part | ContentInput | Sequence[PartInput] | Sequence[ContentInput]


def normalize_model_name(model: str) -> str:
    """Prefix bare model ids with ``models/``; names that already carry a collection are kept."""
    if not model:
        message = "Model name must not be empty"
        raise ValueError(message)
    return model if "/" in model else f"models/{model}"


def to_contents(contents: ContentsType) -> list[Content]:
    """Turn the loose inputs accepted by :meth:`GenerativeModel.generate_content` into content turns.

    Strings, parts and part-shaped wire dicts become a single ``user`` turn;
    :class:`Content` objects and ``{"role", "parts"}`` dicts are used as turns of
    their own. Mixing the two styles is rejected.
    """
    if isinstance(contents, str | Content | Mapping) or isinstance(contents, PART_TYPES):
        items: list[object] = [contents]
    else:
        items = list(cast("Sequence[object]", contents))
    if not items:
        message = "At least one content item is required"
        raise ValueError(message)

    if all(_is_part_input(item) for item in items):
        return [Content.user(*(_as_part(item) for item in items))]
    if all(isinstance(item, Content | Mapping) for item in items):
        return [_as_turn(item) for item in items]
    message = "Contents must be either parts and strings or Content turns, not a mix of both"
    raise TypeError(message)


def _is_part_input(item: object) -> bool:
    if isinstance(item, str) or isinstance(item, PART_TYPES):
        return True
    return isinstance(item, Mapping) and any(key in item for key in DISCRIMINATOR_KEYS)


def _as_part(item: object) -> Part:
    if isinstance(item, str):
        return TextPart(text=item)
    if isinstance(item, Mapping):
        return decode_part(item)
    return cast("Part", item)


def _as_turn(item: object) -> Content:
    if isinstance(item, Content):
        return item
    turn = cast("Mapping[str, object]", item)
    if "parts" not in turn:
        raise MalformedFieldError("parts", "missing")
    return decode_content(turn)


class GenerativeModel(BaseComponent):
    """A model name plus the default request parameters used for every call to it."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        model: str,
        *,
        generation_config: GenerationConfig | None = None,
        safety_settings: Sequence[SafetySetting] | None = None,
        tools: Sequence[Tool] | None = None,
        tool_config: ToolConfig | None = None,
        system_instruction: Content | str | None = None,
        cached_content: str | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self.model_name = normalize_model_name(model)
        self.generation_config = generation_config
        self.safety_settings = list(safety_settings) if safety_settings is not None else None
        self.tools = list(tools) if tools is not None else None
        self.tool_config = tool_config
        if isinstance(system_instruction, str):
            system_instruction = Content(parts=[TextPart(text=system_instruction)])
        self.system_instruction = system_instruction
        self.cached_content = cached_content

    def __repr__(self) -> str:
        return f"GenerativeModel(model_name={self.model_name!r})"

    def build_request(
        self,
        contents: ContentsType,
        *,
        generation_config: GenerationConfig | None = None,
        safety_settings: Sequence[SafetySetting] | None = None,
        tools: Sequence[Tool] | None = None,
        tool_config: ToolConfig | None = None,
    ) -> GenerateContentRequest:
        """Merge per-call overrides over the model defaults into one request."""
        return GenerateContentRequest(
            contents=to_contents(contents),
            generation_config=generation_config or self.generation_config,
            safety_settings=list(safety_settings) if safety_settings is not None else self.safety_settings,
            tools=list(tools) if tools is not None else self.tools,
            tool_config=tool_config or self.tool_config,
            system_instruction=self.system_instruction,
            cached_content=self.cached_content,
        )

    def generate_content(
        self,
        contents: ContentsType,
        *,
        generation_config: GenerationConfig | None = None,
        safety_settings: Sequence[SafetySetting] | None = None,
        tools: Sequence[Tool] | None = None,
        tool_config: ToolConfig | None = None,
    ) -> GenerateContentResponse:
        """Generate a complete response for a prompt or a multi-turn conversation."""
        request = self.build_request(
            contents,
            generation_config=generation_config,
            safety_settings=safety_settings,
            tools=tools,
            tool_config=tool_config,
        )
        self.log_start("generate_content", model=self.model_name, turns=len(request.contents))
        payload = self._dispatcher.post(self.model_name, Task.GENERATE_CONTENT, request.to_wire())
        response = GenerateContentResponse.model_validate(payload)
        self.log_io(direction="response", text=response.text)
        self.log_end("generate_content", candidates=len(response.candidates))
        return response

    def generate_content_stream(
        self,
        contents: ContentsType,
        *,
        generation_config: GenerationConfig | None = None,
        safety_settings: Sequence[SafetySetting] | None = None,
        tools: Sequence[Tool] | None = None,
        tool_config: ToolConfig | None = None,
        strict: bool = False,
    ) -> EventStreamReader:
        """Stream a response as it is generated.

        The returned reader sends the request when iteration starts and yields one
        :class:`GenerateContentResponse` per server event.
        """
        request = self.build_request(
            contents,
            generation_config=generation_config,
            safety_settings=safety_settings,
            tools=tools,
            tool_config=tool_config,
        )
        self.log_start("generate_content_stream", model=self.model_name, turns=len(request.contents))
        chunks = self._dispatcher.stream(self.model_name, Task.STREAM_GENERATE_CONTENT, request.to_wire())
        return EventStreamReader(chunks, strict=strict)
