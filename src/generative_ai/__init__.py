"""Client for the Generative Language REST API."""

from generative_ai.client import GoogleGenerativeAI
from generative_ai.errors import (
    ApiError,
    ConfigurationError,
    DecodeError,
    GenerativeAIError,
    MalformedEventError,
    MalformedFieldError,
    NotAnObjectError,
    TransportError,
    TruncatedStreamError,
    UnknownPartShapeError,
)
from generative_ai.generative_model import GenerativeModel
from generative_ai.models import (
    Candidate,
    Content,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerationConfig,
    ListModelsResponse,
    Model,
    RequestOptions,
    Role,
    SafetySetting,
    Tool,
    ToolConfig,
    decode_content,
    encode_content,
)
from generative_ai.parts import (
    FileDataPart,
    FunctionCallPart,
    FunctionResponsePart,
    InlineDataPart,
    Part,
    TextPart,
    decode_part,
    encode_part,
)
from generative_ai.stream import EventStreamReader, ReaderState

__all__ = [
    "ApiError",
    "Candidate",
    "ConfigurationError",
    "Content",
    "DecodeError",
    "EventStreamReader",
    "FileDataPart",
    "FunctionCallPart",
    "FunctionResponsePart",
    "GenerateContentRequest",
    "GenerateContentResponse",
    "GenerationConfig",
    "GenerativeAIError",
    "GenerativeModel",
    "GoogleGenerativeAI",
    "InlineDataPart",
    "ListModelsResponse",
    "MalformedEventError",
    "MalformedFieldError",
    "Model",
    "NotAnObjectError",
    "Part",
    "ReaderState",
    "RequestOptions",
    "Role",
    "SafetySetting",
    "TextPart",
    "Tool",
    "ToolConfig",
    "TransportError",
    "TruncatedStreamError",
    "UnknownPartShapeError",
    "decode_content",
    "decode_part",
    "encode_content",
    "encode_part",
]
