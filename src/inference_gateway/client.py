"""Async HTTP client for the Inference Gateway.

Each operation is one HTTP exchange through ``httpx``.  On top of the raw
transport this module adds:

* Typed errors (:mod:`inference_gateway.errors`) for transport, status and
  decode failures
* OpenTelemetry spans per operation
* Structured logging via structlog
* :class:`ChatCompletionStream`, the lazy event sequence for streaming calls

Nothing is retried.  Retry policy belongs to the caller or the transport.
"""

import time
from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any, TypeVar

import httpx
import structlog
from opentelemetry import trace
from opentelemetry.trace import Span, StatusCode
from pydantic import BaseModel

from inference_gateway.config import DEFAULT_TIMEOUT, ClientConfig
from inference_gateway.errors import (
    BadRequestError,
    DecodeError,
    ForbiddenError,
    GatewayError,
    HttpStatusError,
    InternalServerError,
    NotFoundError,
    TransportError,
    UnauthorizedError,
)
from inference_gateway.interface import InferenceGatewayAPI
from inference_gateway.models import (
    CreateChatCompletionRequest,
    CreateChatCompletionResponse,
    CreateChatCompletionStreamResponse,
    ListModelsResponse,
    ListToolsResponse,
    Message,
    Provider,
    Tool,
    decode_model,
)
from inference_gateway.streaming import ServerSentEvent, aiter_sse

_log = structlog.get_logger(__name__)
_tracer = trace.get_tracer(__name__)

_M = TypeVar("_M", bound=BaseModel)

# ---------------------------------------------------------------------------
# Gateway error type for each HTTP status (5xx handled separately)
# ---------------------------------------------------------------------------
_STATUS_ERRORS: dict[int, type[HttpStatusError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
}

# Named events the gateway sends around the content; they carry no chunk.
_CONTROL_EVENTS = frozenset({"stream-start", "stream-end"})


# ---------------------------------------------------------------------------
# Streaming
# ---------------------------------------------------------------------------


class ChatCompletionStream:
    """Lazy, single-consumer sequence of :class:`ServerSentEvent` objects.

    The HTTP response stays open while the stream is consumed and is closed
    as soon as the stream is exhausted, fails, or is closed explicitly.  Use
    it as an async context manager so that breaking out early still releases
    the connection::

        async with await client.generate_content_stream(
            Provider.GROQ, "llama-3.3-70b-versatile", [Message.user("Hi")]
        ) as stream:
            async for chunk in stream.chunks():
                print(chunk.first_delta_content or "", end="")

    Iterating yields raw events; :meth:`chunks` decodes them.  A transport
    failure mid-stream is raised as :class:`TransportError` on the pull that
    hits it and never affects events already delivered.  A body that fails
    ``Content-Encoding`` decompression is raised the same way as
    :class:`DecodeError`.
    """

    def __init__(
        self,
        response: httpx.Response,
        *,
        owned_client: httpx.AsyncClient | None = None,
        span: Span | None = None,
    ) -> None:
        self._response = response
        self._owned_client = owned_client
        self._span = span
        self._events: AsyncGenerator[ServerSentEvent, None] = aiter_sse(response.aiter_bytes())
        self._closed = False
        self._delivered = 0

    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "ChatCompletionStream":
        return self

    async def __anext__(self) -> ServerSentEvent:
        if self._closed:
            raise StopAsyncIteration

        try:
            event = await self._events.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise
        except httpx.RequestError as exc:
            error = _request_error(exc, "Stream read")
            self._record_error(error)
            await self.aclose()
            raise error from exc
        except BaseException as exc:
            self._record_error(exc)
            await self.aclose()
            raise

        self._delivered += 1
        return event

    async def __aenter__(self) -> "ChatCompletionStream":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the HTTP response.  Safe to call more than once.

        May be called from another task while a pull is waiting on the
        network; the response is closed either way.
        """
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
            # A generator suspended in another task's pull cannot be closed here;
            # it finishes once that pull returns or is cancelled.
            if not self._events.ag_running:
                await self._events.aclose()
        finally:
            if self._owned_client is not None:
                await self._owned_client.aclose()
            if self._span is not None:
                self._span.set_attribute("gateway.stream.events", self._delivered)
                self._span.end()
            _log.debug("gateway_stream_closed", events=self._delivered)

    async def chunks(self) -> AsyncIterator[CreateChatCompletionStreamResponse]:
        """Yield decoded chat-completion chunks until ``[DONE]`` or end of stream.

        ``stream-start`` / ``stream-end`` control events are skipped.  The
        stream is closed when this iterator finishes or is closed.

        Raises:
            DecodeError: An event's data is not a valid chunk.
        """
        try:
            async for event in self:
                if event.is_done:
                    break
                if event.event in _CONTROL_EVENTS:
                    continue
                yield event.decode_chunk()
        finally:
            await self.aclose()

    async def collect_content(self) -> str:
        """Consume the stream and return the concatenated delta content."""
        parts: list[str] = []
        async for chunk in self.chunks():
            content = chunk.first_delta_content
            if content:
                parts.append(content)
        return "".join(parts)

    def _record_error(self, exc: BaseException) -> None:
        if self._span is not None:
            self._span.record_exception(exc)
            self._span.set_status(StatusCode.ERROR, str(exc))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class InferenceGatewayClient(InferenceGatewayAPI):
    """Client for the Inference Gateway's OpenAI-compatible API.

    Configuration is immutable: the ``with_*`` methods return a new client and
    leave the original untouched, so one client can be shared by concurrent
    tasks without locking.

    Example::

        client = InferenceGatewayClient("http://localhost:8080").with_token("secret")
        response = await client.generate_content(
            Provider.OPENAI, "gpt-4o", [Message.user("Hello")]
        )
        print(response.first_content)

    Args:
        base_url: Gateway root URL.
        token: Optional bearer token.
        tools: Default tools attached to chat-completion requests.
        max_tokens: Default ``max_tokens`` for chat-completion requests.
        timeout: Transport timeout in seconds.
        http_client: Caller-owned ``httpx.AsyncClient`` to send requests
            through.  When omitted, each call opens and closes its own client.

    Raises:
        ConfigError: If the configuration is invalid.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        tools: Sequence[Tool] | None = None,
        max_tokens: int | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = ClientConfig(
            base_url=base_url,
            token=token,
            tools=tuple(tools) if tools is not None else None,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        self._http_client = http_client

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> "InferenceGatewayClient":
        return cls(
            config.base_url,
            token=config.token,
            tools=config.tools,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
            http_client=http_client,
        )

    @classmethod
    def from_env(cls, *, http_client: httpx.AsyncClient | None = None) -> "InferenceGatewayClient":
        """Build a client from ``INFERENCE_GATEWAY_*`` environment variables."""
        return cls.from_config(ClientConfig.from_settings(), http_client=http_client)

    @property
    def config(self) -> ClientConfig:
        return self._config

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def with_token(self, token: str | None) -> "InferenceGatewayClient":
        return self._with(token=token)

    def with_tools(self, tools: Sequence[Tool] | None) -> "InferenceGatewayClient":
        return self._with(tools=tuple(tools) if tools is not None else None)

    def with_max_tokens(self, max_tokens: int | None) -> "InferenceGatewayClient":
        return self._with(max_tokens=max_tokens)

    def with_timeout(self, timeout: float) -> "InferenceGatewayClient":
        return self._with(timeout=timeout)

    def _with(self, **changes: Any) -> "InferenceGatewayClient":
        return self.from_config(replace(self._config, **changes), http_client=self._http_client)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_models(self) -> ListModelsResponse:
        response = await self._call("list_models", "GET", "/v1/models")
        return _decode(response, ListModelsResponse)

    async def list_models_by_provider(self, provider: Provider | str) -> ListModelsResponse:
        provider = _as_provider(provider)
        response = await self._call(
            "list_models_by_provider",
            "GET",
            "/v1/models",
            params={"provider": provider.value},
            attributes={"gen_ai.system": provider.value},
        )
        return _decode(response, ListModelsResponse)

    async def list_tools(self) -> ListToolsResponse:
        """List MCP tools.

        Raises:
            ForbiddenError: The gateway does not expose MCP (HTTP 403).
        """
        try:
            response = await self._call("list_tools", "GET", "/v1/mcp/tools")
        except ForbiddenError as exc:
            raise ForbiddenError(
                "MCP tools are not exposed by the gateway",
                status=exc.status,
                body=exc.body,
                original_error=exc,
            ) from exc
        return _decode(response, ListToolsResponse)

    async def generate_content(
        self,
        provider: Provider | str,
        model: str,
        messages: Sequence[Message],
    ) -> CreateChatCompletionResponse:
        provider = _as_provider(provider)
        response = await self._call(
            "generate_content",
            "POST",
            "/v1/chat/completions",
            params={"provider": provider.value},
            body=self._chat_body(model, messages, stream=False),
            attributes={"gen_ai.system": provider.value, "gen_ai.request.model": model},
        )
        return _decode(response, CreateChatCompletionResponse)

    async def generate_content_stream(
        self,
        provider: Provider | str,
        model: str,
        messages: Sequence[Message],
    ) -> ChatCompletionStream:
        """Start a streaming chat completion.

        The request is sent and its status checked before this returns, so
        status errors are raised here rather than on the first pull.

        Raises:
            TransportError: The request could not be sent.
            HttpStatusError: The gateway answered with a non-2xx status.
        """
        provider = _as_provider(provider)
        body = self._chat_body(model, messages, stream=True)

        span = _tracer.start_span("gateway.generate_content_stream")
        span.set_attribute("http.method", "POST")
        span.set_attribute("url.path", "/v1/chat/completions")
        span.set_attribute("gen_ai.system", provider.value)
        span.set_attribute("gen_ai.request.model", model)

        owned_client: httpx.AsyncClient | None = None
        client = self._http_client
        if client is None:
            owned_client = client = httpx.AsyncClient(timeout=self._config.timeout)

        try:
            request = self._build_request(
                client,
                "POST",
                "/v1/chat/completions",
                params={"provider": provider.value},
                body=body,
                stream=True,
            )
            response = await _send_stream(client, request)
        except BaseException as exc:
            span.record_exception(exc)
            span.set_status(StatusCode.ERROR, str(exc))
            span.end()
            if owned_client is not None:
                await owned_client.aclose()
            raise

        span.set_attribute("http.status_code", response.status_code)
        _log.debug(
            "gateway_stream_open",
            provider=provider.value,
            model=model,
            status=response.status_code,
        )
        return ChatCompletionStream(response, owned_client=owned_client, span=span)

    async def health_check(self) -> bool:
        """Return ``True`` on HTTP 200 from ``/v1/health``, ``False`` on any other status.

        Raises:
            TransportError: The gateway could not be reached at all.
        """
        response = await self._call("health_check", "GET", "/v1/health", check_status=False)
        return response.status_code == 200

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _chat_body(
        self, model: str, messages: Sequence[Message], *, stream: bool
    ) -> dict[str, Any]:
        request = CreateChatCompletionRequest(
            model=model,
            messages=list(messages),
            tools=list(self._config.tools) if self._config.tools else None,
            max_tokens=self._config.max_tokens,
            stream=True if stream else None,
        )
        return request.model_dump(mode="json", exclude_none=True)

    def _headers(self, *, stream: bool) -> dict[str, str]:
        headers = {"Accept": "text/event-stream" if stream else "application/json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        return headers

    def _build_request(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
        stream: bool = False,
    ) -> httpx.Request:
        return client.build_request(
            method,
            f"{self._config.base_url}{path}",
            params=params,
            json=body,
            headers=self._headers(stream=stream),
            timeout=self._config.timeout,
        )

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self._config.timeout) as client:
            yield client

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
        attributes: dict[str, str] | None = None,
        check_status: bool = True,
    ) -> httpx.Response:
        """Send one request and return the fully read response."""
        start_time = time.monotonic()

        with _tracer.start_as_current_span(f"gateway.{operation}") as span:
            span.set_attribute("http.method", method)
            span.set_attribute("url.path", path)
            for key, value in (attributes or {}).items():
                span.set_attribute(key, value)

            try:
                async with self._client() as client:
                    request = self._build_request(client, method, path, params=params, body=body)
                    response = await client.send(request)
            except httpx.RequestError as exc:
                # The span records the mapped error as it propagates
                raise _request_error(exc, f"{method} {path}") from exc

            span.set_attribute("http.status_code", response.status_code)
            duration_ms = round((time.monotonic() - start_time) * 1000, 2)
            _log.debug(
                "gateway_request_complete",
                operation=operation,
                method=method,
                path=path,
                status=response.status_code,
                duration_ms=duration_ms,
            )

            if check_status:
                _raise_for_status(response)

            return response


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


async def _send_stream(client: httpx.AsyncClient, request: httpx.Request) -> httpx.Response:
    """Send *request* without reading the body; error responses are read and closed."""
    try:
        response = await client.send(request, stream=True)
    except httpx.RequestError as exc:
        raise _request_error(exc, f"{request.method} {request.url.path}") from exc

    if not response.is_success:
        try:
            await response.aread()
        except httpx.RequestError as exc:
            raise _request_error(exc, "Error body read") from exc
        finally:
            await response.aclose()
        _raise_for_status(response)

    return response


def _request_error(exc: httpx.RequestError, context: str) -> GatewayError:
    """Map an httpx request failure to a gateway error.

    A body that fails ``Content-Encoding`` decompression is a :class:`DecodeError`;
    every other request failure is a :class:`TransportError`.
    """
    if isinstance(exc, httpx.DecodingError):
        return DecodeError(
            f"{context} failed, body could not be decoded: {exc}", original_error=exc
        )
    return TransportError(f"{context} failed: {exc}", original_error=exc)


def _raise_for_status(response: httpx.Response) -> None:
    """Map a non-2xx *response* to the matching :class:`HttpStatusError` subclass."""
    if response.is_success:
        return

    status = response.status_code
    body = _error_body(response)

    error_type = _STATUS_ERRORS.get(status)
    if error_type is None:
        error_type = InternalServerError if status >= 500 else HttpStatusError

    message = f"Gateway returned HTTP {status}"
    if body:
        message = f"{message}: {body}"
    raise error_type(message, status=status, body=body)


def _error_body(response: httpx.Response) -> str | None:
    """Extract the upstream error message, falling back to the raw text."""
    text = response.text
    if not text:
        return None
    try:
        payload = response.json()
    except ValueError:
        return text

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str):
            return error
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return text


def _decode(response: httpx.Response, model_type: type[_M]) -> _M:
    return decode_model(model_type, response.content)


def _as_provider(provider: Provider | str) -> Provider:
    if isinstance(provider, Provider):
        return provider
    return Provider.parse(provider)
