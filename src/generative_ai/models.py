"""Request and response models for the Generative Language API."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Annotated, Any, Literal, Self, cast

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from generative_ai.errors import MalformedFieldError
from generative_ai.parts import PART_TYPES, Part, TextPart, decode_part, encode_part
from generative_ai.settings import DEFAULT_BASE_URL, Settings


class WireModel(BaseModel):
    """Base model mapping snake_case attributes to the API's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict with camelCase keys and unset fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Role(StrEnum):
    USER = "user"
    MODEL = "model"
    FUNCTION = "function"


class Content(WireModel):
    """An ordered sequence of parts attributed to a role."""

    role: str | None = None
    parts: list[Part] = Field(default_factory=list)

    @field_validator("parts", mode="before")
    @classmethod
    def _decode_parts(cls, value: object) -> object:
        if not isinstance(value, list):
            return value
        items = cast("list[object]", value)
        return [item if isinstance(item, PART_TYPES) else decode_part(item) for item in items]

    @field_serializer("parts")
    def _encode_parts(self, parts: list[Part]) -> list[dict[str, JsonValue]]:
        return [encode_part(part) for part in parts]

    @property
    def text(self) -> str:
        """Concatenated text of every text part."""
        return "".join(part.text for part in self.parts if isinstance(part, TextPart))

    @classmethod
    def user(cls, *parts: Part | str) -> Self:
        return cls(role=Role.USER.value, parts=[_as_part(part) for part in parts])

    @classmethod
    def model(cls, *parts: Part | str) -> Self:
        return cls(role=Role.MODEL.value, parts=[_as_part(part) for part in parts])


def _as_part(value: Part | str) -> Part:
    return TextPart(text=value) if isinstance(value, str) else value


def encode_content(content: Content) -> dict[str, Any]:
    """Return the wire object for ``content``, preserving part order."""
    return content.to_wire()


def decode_content(value: object) -> Content:
    """Decode a wire object into :class:`Content`, decoding each part through the part codec."""
    if not isinstance(value, Mapping):
        raise MalformedFieldError("content", f"expected an object, got {type(value).__name__}")
    obj = cast("Mapping[str, object]", value)
    role = obj.get("role")
    if role is not None and not isinstance(role, str):
        raise MalformedFieldError("role", f"expected a string, got {type(role).__name__}")
    raw_parts = obj.get("parts", [])
    if not isinstance(raw_parts, list):
        raise MalformedFieldError("parts", f"expected an array, got {type(raw_parts).__name__}")
    parts = [decode_part(item) for item in cast("list[object]", raw_parts)]
    return Content(role=role, parts=parts)


# Server enums. Values this client does not know yet are kept as plain strings.


class HarmCategory(StrEnum):
    HARM_CATEGORY_UNSPECIFIED = "HARM_CATEGORY_UNSPECIFIED"
    HARM_CATEGORY_HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    HARM_CATEGORY_SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    HARM_CATEGORY_HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HARM_CATEGORY_DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"


class HarmProbability(StrEnum):
    HARM_PROBABILITY_UNSPECIFIED = "HARM_PROBABILITY_UNSPECIFIED"
    NEGLIGIBLE = "NEGLIGIBLE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class HarmBlockThreshold(StrEnum):
    HARM_BLOCK_THRESHOLD_UNSPECIFIED = "HARM_BLOCK_THRESHOLD_UNSPECIFIED"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_NONE = "BLOCK_NONE"


class FinishReason(StrEnum):
    FINISH_REASON_UNSPECIFIED = "FINISH_REASON_UNSPECIFIED"
    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"
    SAFETY = "SAFETY"
    RECITATION = "RECITATION"
    LANGUAGE = "LANGUAGE"
    OTHER = "OTHER"


class BlockReason(StrEnum):
    BLOCKED_REASON_UNSPECIFIED = "BLOCKED_REASON_UNSPECIFIED"
    SAFETY = "SAFETY"
    OTHER = "OTHER"


class SchemaType(StrEnum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    ARRAY = "ARRAY"
    OBJECT = "OBJECT"


class FunctionCallingMode(StrEnum):
    MODE_UNSPECIFIED = "MODE_UNSPECIFIED"
    AUTO = "AUTO"
    ANY = "ANY"
    NONE = "NONE"


class Task(StrEnum):
    """API methods addressed as ``{model}:{task}``."""

    GENERATE_CONTENT = "generateContent"
    STREAM_GENERATE_CONTENT = "streamGenerateContent"
    COUNT_TOKENS = "countTokens"
    EMBED_CONTENT = "embedContent"
    BATCH_EMBED_CONTENTS = "batchEmbedContents"


HarmCategoryValue = Annotated[HarmCategory | str, Field(union_mode="left_to_right")]
HarmProbabilityValue = Annotated[HarmProbability | str, Field(union_mode="left_to_right")]
FinishReasonValue = Annotated[FinishReason | str | None, Field(union_mode="left_to_right")]
BlockReasonValue = Annotated[BlockReason | str | None, Field(union_mode="left_to_right")]


# Response side.


class SafetyRating(WireModel):
    category: HarmCategoryValue
    probability: HarmProbabilityValue
    blocked: bool | None = None


class CitationSource(WireModel):
    start_index: int | None = None
    end_index: int | None = None
    uri: str | None = None
    license: str | None = None


class CitationMetadata(WireModel):
    citation_sources: list[CitationSource] = Field(default_factory=list)


class Candidate(WireModel):
    """One generated candidate; in streaming mode, one slice of it."""

    index: int = 0
    content: Content | None = None
    finish_reason: FinishReasonValue = None
    safety_ratings: list[SafetyRating] = Field(default_factory=list)
    citation_metadata: CitationMetadata | None = None
    token_count: int | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _decode_content(cls, value: object) -> object:
        return decode_content(value) if isinstance(value, Mapping) else value


class PromptFeedback(WireModel):
    """Populated when the prompt itself was blocked."""

    block_reason: BlockReasonValue = None
    safety_ratings: list[SafetyRating] = Field(default_factory=list)
    block_reason_message: str | None = None


class UsageMetadata(WireModel):
    prompt_token_count: int = 0
    candidates_token_count: int = 0
    total_token_count: int = 0
    cached_content_token_count: int | None = None


class GenerateContentResponse(WireModel):
    """A complete response, or one event of a streamed response."""

    candidates: list[Candidate] = Field(default_factory=list)
    prompt_feedback: PromptFeedback | None = None
    usage_metadata: UsageMetadata | None = None

    @property
    def text(self) -> str:
        """Text of the first candidate, or an empty string when there is none."""
        if not self.candidates or self.candidates[0].content is None:
            return ""
        return self.candidates[0].content.text

    @property
    def parts(self) -> list[Part]:
        if not self.candidates or self.candidates[0].content is None:
            return []
        return list(self.candidates[0].content.parts)


class Model(WireModel):
    """A model entry returned by ``models.list``."""

    name: str
    base_model_id: str | None = None
    version: str = ""
    display_name: str = ""
    description: str = ""
    input_token_limit: int = 0
    output_token_limit: int = 0
    supported_generation_methods: list[str] = Field(default_factory=list)
    temperature: float | None = None
    max_temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None


class ListModelsResponse(WireModel):
    models: list[Model] = Field(default_factory=list)
    next_page_token: str | None = None


# Request side.


class Schema(WireModel):
    """Subset of an OpenAPI 3.0 schema object."""

    type: SchemaType
    format: str | None = None
    description: str | None = None
    nullable: bool | None = None
    enum: list[str] | None = None
    items: Schema | None = None
    properties: dict[str, Schema] | None = None
    required: list[str] | None = None
    example: JsonValue = None


class FunctionDeclaration(WireModel):
    name: str
    description: str | None = None
    parameters: Schema | None = None


class Tool(WireModel):
    function_declarations: list[FunctionDeclaration] | None = None


class FunctionCallingConfig(WireModel):
    mode: FunctionCallingMode | None = None
    allowed_function_names: list[str] | None = None


class ToolConfig(WireModel):
    function_calling_config: FunctionCallingConfig


class SafetySetting(WireModel):
    category: HarmCategory
    threshold: HarmBlockThreshold


class GenerationConfig(WireModel):
    """Sampling and output options; unset fields fall back to the model's defaults."""

    candidate_count: int | None = Field(default=None, ge=1)
    stop_sequences: list[str] | None = Field(default=None, max_length=5)
    max_output_tokens: int | None = Field(default=None, ge=1)
    temperature: float | None = Field(default=None, ge=0.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    top_k: int | None = Field(default=None, ge=1)
    response_mime_type: str | None = None
    response_schema: Schema | None = None


class GenerateContentRequest(WireModel):
    contents: list[Content]
    generation_config: GenerationConfig | None = None
    safety_settings: list[SafetySetting] | None = None
    tools: list[Tool] | None = None
    tool_config: ToolConfig | None = None
    system_instruction: Content | None = None
    cached_content: str | None = None


class RequestOptions(BaseModel):
    """Transport options shared by every call made through one client."""

    model_config = ConfigDict(frozen=True)

    timeout: float | None = Field(default=None, gt=0.0)
    api_version: Literal["v1", "v1beta"] = "v1beta"
    api_client: str | None = None
    base_url: str = DEFAULT_BASE_URL
    custom_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_settings(cls, app_settings: Settings, **overrides: Any) -> Self:
        values: dict[str, Any] = {
            "timeout": app_settings.request_timeout,
            "api_version": app_settings.api_version,
            "base_url": app_settings.base_url,
        }
        values.update(overrides)
        return cls(**values)
