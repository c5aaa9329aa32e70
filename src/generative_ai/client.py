"""Top-level client that lists models and hands out model handles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

from generative_ai.generative_model import GenerativeModel
from generative_ai.logger import BaseComponent
from generative_ai.models import ListModelsResponse, RequestOptions
from generative_ai.settings import Settings, settings
from generative_ai.transport import RequestDispatcher

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    import httpx

    from generative_ai.models import Content, GenerationConfig, SafetySetting, Tool, ToolConfig


class GoogleGenerativeAI(BaseComponent):
    """Entry point: lists models and hands out :class:`GenerativeModel` instances."""

    def __init__(
        self,
        api_key: str | None = None,
        request_options: RequestOptions | None = None,
        *,
        app_settings: Settings | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        active_settings = app_settings or settings
        resolved_key = api_key or active_settings.api_key.get_secret_value()
        options = request_options or RequestOptions.from_settings(active_settings)
        self._dispatcher = RequestDispatcher(resolved_key, options, client=http_client)
        self._settings = active_settings

    @property
    def request_options(self) -> RequestOptions:
        return self._dispatcher.options

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._dispatcher.close()

    def list_models(self, *, page_size: int | None = None, page_token: str | None = None) -> ListModelsResponse:
        """Return one page of the models available to this API key."""
        params: dict[str, str | int] = {}
        if page_size is not None:
            params["pageSize"] = page_size
        if page_token:
            params["pageToken"] = page_token
        payload = self._dispatcher.get("models", params)
        response = ListModelsResponse.model_validate(payload)
        self.logger.info("models_listed", count=len(response.models), has_more=response.next_page_token is not None)
        return response

    def get_generative_model(
        self,
        model: str | None = None,
        *,
        generation_config: GenerationConfig | None = None,
        safety_settings: Sequence[SafetySetting] | None = None,
        tools: Sequence[Tool] | None = None,
        tool_config: ToolConfig | None = None,
        system_instruction: Content | str | None = None,
        cached_content: str | None = None,
    ) -> GenerativeModel:
        """Return a model bound to this client's transport; ``model`` defaults to ``GEMINI_MODEL``."""
        return GenerativeModel(
            self._dispatcher,
            model or self._settings.default_model,
            generation_config=generation_config,
            safety_settings=safety_settings,
            tools=tools,
            tool_config=tool_config,
            system_instruction=system_instruction,
            cached_content=cached_content,
        )
