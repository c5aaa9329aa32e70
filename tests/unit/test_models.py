from __future__ import annotations

import pytest
from pydantic import ValidationError

from generative_ai.errors import MalformedFieldError, UnknownPartShapeError
from generative_ai.models import (
    Content,
    FinishReason,
    FunctionCallingConfig,
    FunctionCallingMode,
    FunctionDeclaration,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerationConfig,
    HarmBlockThreshold,
    HarmCategory,
    ListModelsResponse,
    RequestOptions,
    Role,
    SafetySetting,
    Schema,
    SchemaType,
    Tool,
    ToolConfig,
    decode_content,
    encode_content,
)
from generative_ai.parts import FunctionCallPart, InlineDataPart, TextPart


def test_content_preserves_part_order_on_the_wire() -> None:
    """Parts keep their order through encode and decode."""
    content = Content.user("first", InlineDataPart(mime_type="image/png", data="AA"), "last")

    wire = encode_content(content)

    assert wire == {
        "role": "user",
        "parts": [
            {"text": "first"},
            {"inlineData": {"mimeType": "image/png", "data": "AA"}},
            {"text": "last"},
        ],
    }
    assert decode_content(wire) == content


def test_content_without_role_omits_it() -> None:
    """System instructions carry no role key."""
    assert encode_content(Content(parts=[TextPart(text="be brief")])) == {"parts": [{"text": "be brief"}]}


def test_decode_content_defaults_missing_parts() -> None:
    """A turn without parts decodes to an empty part list."""
    content = decode_content({"role": "model"})

    assert content.role == Role.MODEL
    assert content.parts == []
    assert content.text == ""


@pytest.mark.parametrize(
    ("value", "field"),
    [
        ("text", "content"),
        ({"role": 1, "parts": []}, "role"),
        ({"role": "user", "parts": {"text": "x"}}, "parts"),
    ],
)
def test_decode_content_rejects_bad_structure(value: object, field: str) -> None:
    """Structural problems in a turn are reported with the field name."""
    with pytest.raises(MalformedFieldError) as excinfo:
        decode_content(value)

    assert excinfo.value.field == field


def test_content_validation_propagates_part_errors() -> None:
    """Part decode errors are raised as-is instead of being wrapped by pydantic."""
    with pytest.raises(UnknownPartShapeError):
        Content.model_validate({"role": "user", "parts": [{"mystery": 1}]})


def test_content_text_joins_text_parts_only() -> None:
    """Non-text parts are skipped when collecting text."""
    content = Content.model(
        "Hello, ",
        FunctionCallPart(name="noop", args={}),
        "world",
    )

    assert content.text == "Hello, world"


def test_response_parses_camel_case_payload() -> None:
    """A full response decodes candidates, ratings and usage."""
    payload = {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": "Hi"}, {"text": " there"}]},
                "finishReason": "STOP",
                "index": 0,
                "safetyRatings": [{"category": "HARM_CATEGORY_HARASSMENT", "probability": "NEGLIGIBLE"}],
                "citationMetadata": {"citationSources": [{"startIndex": 1, "endIndex": 4, "uri": "https://a.test"}]},
            },
        ],
        "promptFeedback": {"safetyRatings": []},
        "usageMetadata": {"promptTokenCount": 3, "candidatesTokenCount": 2, "totalTokenCount": 5},
    }

    response = GenerateContentResponse.model_validate(payload)

    candidate = response.candidates[0]
    assert response.text == "Hi there"
    assert candidate.finish_reason == FinishReason.STOP
    assert candidate.safety_ratings[0].category == HarmCategory.HARM_CATEGORY_HARASSMENT
    assert candidate.citation_metadata is not None
    assert candidate.citation_metadata.citation_sources[0].end_index == 4
    assert response.usage_metadata is not None
    assert response.usage_metadata.total_token_count == 5


def test_response_keeps_unknown_enum_values() -> None:
    """Enum values added server-side later are kept as strings."""
    payload = {
        "candidates": [
            {
                "finishReason": "BLOCKLIST",
                "safetyRatings": [{"category": "HARM_CATEGORY_CIVIC_INTEGRITY", "probability": "LOW"}],
            },
        ],
        "promptFeedback": {"blockReason": "PROHIBITED_CONTENT"},
    }

    response = GenerateContentResponse.model_validate(payload)

    assert response.candidates[0].finish_reason == "BLOCKLIST"
    assert not isinstance(response.candidates[0].finish_reason, FinishReason)
    assert response.candidates[0].safety_ratings[0].category == "HARM_CATEGORY_CIVIC_INTEGRITY"
    assert response.prompt_feedback is not None
    assert response.prompt_feedback.block_reason == "PROHIBITED_CONTENT"


def test_empty_response_has_no_text() -> None:
    """A response without candidates yields empty text and parts."""
    response = GenerateContentResponse.model_validate({})

    assert response.text == ""
    assert response.parts == []


def test_request_serializes_to_camel_case() -> None:
    """Requests drop unset fields and use the API's key names."""
    request = GenerateContentRequest(
        contents=[Content.user("What is the weather?")],
        generation_config=GenerationConfig(temperature=0.2, max_output_tokens=64, stop_sequences=["END"]),
        safety_settings=[
            SafetySetting(
                category=HarmCategory.HARM_CATEGORY_HATE_SPEECH,
                threshold=HarmBlockThreshold.BLOCK_ONLY_HIGH,
            ),
        ],
        tools=[
            Tool(
                function_declarations=[
                    FunctionDeclaration(
                        name="get_weather",
                        parameters=Schema(
                            type=SchemaType.OBJECT,
                            properties={"city": Schema(type=SchemaType.STRING)},
                            required=["city"],
                        ),
                    ),
                ],
            ),
        ],
        tool_config=ToolConfig(function_calling_config=FunctionCallingConfig(mode=FunctionCallingMode.AUTO)),
    )

    assert request.to_wire() == {
        "contents": [{"role": "user", "parts": [{"text": "What is the weather?"}]}],
        "generationConfig": {"temperature": 0.2, "maxOutputTokens": 64, "stopSequences": ["END"]},
        "safetySettings": [{"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_ONLY_HIGH"}],
        "tools": [
            {
                "functionDeclarations": [
                    {
                        "name": "get_weather",
                        "parameters": {
                            "type": "OBJECT",
                            "properties": {"city": {"type": "STRING"}},
                            "required": ["city"],
                        },
                    },
                ],
            },
        ],
        "toolConfig": {"functionCallingConfig": {"mode": "AUTO"}},
    }


@pytest.mark.parametrize(
    "values",
    [
        {"top_p": 1.5},
        {"temperature": -0.1},
        {"candidate_count": 0},
        {"stop_sequences": ["a", "b", "c", "d", "e", "f"]},
    ],
)
def test_generation_config_rejects_out_of_range_values(values: dict[str, object]) -> None:
    """Sampling options are range-checked before a request is sent."""
    with pytest.raises(ValidationError):
        GenerationConfig.model_validate(values)


def test_list_models_response_parses_page() -> None:
    """Model listings decode names, limits and the page token."""
    response = ListModelsResponse.model_validate(
        {
            "models": [
                {
                    "name": "models/gemini-1.5-flash",
                    "displayName": "Gemini 1.5 Flash",
                    "inputTokenLimit": 1048576,
                    "outputTokenLimit": 8192,
                    "supportedGenerationMethods": ["generateContent", "countTokens"],
                },
            ],
            "nextPageToken": "page-2",
        },
    )

    assert response.models[0].display_name == "Gemini 1.5 Flash"
    assert response.models[0].input_token_limit == 1048576
    assert response.next_page_token == "page-2"


def test_request_options_strip_trailing_slash() -> None:
    """Base URLs are normalized so paths join with one slash."""
    options = RequestOptions(base_url="http://localhost:9000///")

    assert options.base_url == "http://localhost:9000"
    assert options.api_version == "v1beta"
