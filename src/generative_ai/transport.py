"""HTTP transport for the Generative Language REST API."""

from __future__ import annotations

from collections.abc import Mapping
from time import perf_counter
from typing import TYPE_CHECKING, Any, Self, cast

import httpx

from generative_ai.errors import ApiError, ConfigurationError, TransportError
from generative_ai.logger import BaseComponent
from generative_ai.models import RequestOptions, Task

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

_CLIENT_NAME = "generative-ai-python"


class RequestDispatcher(BaseComponent):
    """Sends requests to ``{base_url}/{api_version}/{model}:{task}`` and maps HTTP failures to errors."""

    def __init__(
        self,
        api_key: str,
        options: RequestOptions | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            message = "An API key is required; set GEMINI_API_KEY or pass api_key"
            raise ConfigurationError(message)
        self._api_key = api_key
        self._options = options or RequestOptions()
        self._owns_client = client is None
        if client is None:
            client_kwargs: dict[str, Any] = {}
            if self._options.timeout is not None:
                client_kwargs["timeout"] = self._options.timeout
            client = httpx.Client(**client_kwargs)
        self._client = client

    @property
    def options(self) -> RequestOptions:
        return self._options

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
        """Close the underlying HTTP client when this dispatcher created it."""
        if self._owns_client:
            self._client.close()

    def build_url(self, model: str, task: Task | str | None = None) -> str:
        url = f"{self._options.base_url}/{self._options.api_version}/{model}"
        return f"{url}:{task}" if task else url

    def headers(self) -> dict[str, str]:
        api_client = f"{self._options.api_client} {_CLIENT_NAME}" if self._options.api_client else _CLIENT_NAME
        return {
            "Content-Type": "application/json",
            "x-goog-api-client": api_client,
            **self._options.custom_headers,
        }

    def _params(self, *, stream: bool = False, extra: Mapping[str, str | int] | None = None) -> dict[str, str | int]:
        params: dict[str, str | int] = {"key": self._api_key}
        if stream:
            params["alt"] = "sse"
        if extra:
            params.update(extra)
        return params

    def post(self, model: str, task: Task | str, body: Mapping[str, Any]) -> dict[str, Any]:
        """Issue a unary POST and return the decoded JSON object."""
        self.log_start("post", model=model, task=str(task))
        self.log_io(direction="request", body=cast("dict[str, Any]", dict(body)))
        start = perf_counter()
        try:
            response = self._client.post(
                self.build_url(model, task),
                params=self._params(),
                headers=self.headers(),
                json=dict(body),
            )
        except httpx.TransportError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        payload = _json_object(response)
        self.log_end(
            "post",
            status_code=response.status_code,
            elapsed_seconds=perf_counter() - start,
        )
        return payload

    def get(self, path: str, params: Mapping[str, str | int] | None = None) -> dict[str, Any]:
        """Issue a GET against ``{base_url}/{api_version}/{path}``."""
        self.log_start("get", path=path)
        start = perf_counter()
        try:
            response = self._client.get(
                self.build_url(path),
                params=self._params(extra=params),
                headers=self.headers(),
            )
        except httpx.TransportError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        payload = _json_object(response)
        self.log_end("get", status_code=response.status_code, elapsed_seconds=perf_counter() - start)
        return payload

    def stream(self, model: str, task: Task | str, body: Mapping[str, Any]) -> Iterator[bytes]:
        """Issue a streaming POST and yield the raw response body chunk by chunk.

        The request is sent on the first ``next()``. Closing the generator closes the
        HTTP response.
        """
        self.log_start("stream", model=model, task=str(task))
        self.log_io(direction="request", body=cast("dict[str, Any]", dict(body)))
        start = perf_counter()
        received = 0
        try:
            with self._client.stream(
                "POST",
                self.build_url(model, task),
                params=self._params(stream=True),
                headers=self.headers(),
                json=dict(body),
            ) as response:
                if response.is_error:
                    response.read()
                    raise _api_error(response)
                for chunk in response.iter_bytes():
                    received += len(chunk)
                    yield chunk
        except httpx.TransportError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        finally:
            self.log_end("stream", bytes_received=received, elapsed_seconds=perf_counter() - start)


def _json_object(response: httpx.Response) -> dict[str, Any]:
    if response.is_error:
        raise _api_error(response)
    try:
        payload = response.json()
    except ValueError as exc:
        message = "Response body is not valid JSON"
        raise ApiError(response.status_code, message, response.text) from exc
    if not isinstance(payload, dict):
        message = f"Expected a JSON object, got {type(payload).__name__}"
        raise ApiError(response.status_code, message, payload)
    return cast("dict[str, Any]", payload)


def _api_error(response: httpx.Response) -> ApiError:
    try:
        body: object = response.json()
    except ValueError:
        body = response.text
    message = response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = cast("dict[str, object]", body).get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            message = str(error["message"])
    return ApiError(response.status_code, message, body)
