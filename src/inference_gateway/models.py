"""Request and response schemas for the Inference Gateway wire format.

The gateway speaks the OpenAI chat-completions dialect, so these models mirror
that shape.  Every model is frozen: values are built per request or response
and never mutated afterwards.

Unknown *fields* in responses are ignored so newer gateways keep working, but
unknown values for the closed :class:`MessageRole` and :class:`Provider` sets
are rejected.  Use :func:`decode_model` to turn a raw body into a model; it
maps every JSON or schema failure to :class:`~inference_gateway.errors.DecodeError`.
"""

import json
from enum import StrEnum
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from inference_gateway.errors import DecodeError


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


_M = TypeVar("_M", bound=BaseModel)


# ---------------------------------------------------------------------------
# Closed enums
# ---------------------------------------------------------------------------


class MessageRole(StrEnum):
    """Role of a message author.  Serialised in lowercase."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Provider(StrEnum):
    """LLM backends the gateway can route to.

    The value is the lowercase provider id, usable verbatim as a URL query or
    path segment.
    """

    OLLAMA = "ollama"
    GROQ = "groq"
    OPENAI = "openai"
    CLOUDFLARE = "cloudflare"
    COHERE = "cohere"
    ANTHROPIC = "anthropic"
    DEEPSEEK = "deepseek"

    @classmethod
    def parse(cls, value: str) -> "Provider":
        """Case-insensitive lookup, e.g. ``Provider.parse("GROQ") is Provider.GROQ``.

        Raises:
            DecodeError: *value* does not name a known provider.
        """
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            known = ", ".join(p.value for p in cls)
            raise DecodeError(
                f"Unknown provider '{value}'; must be one of: {known}",
                original_error=exc,
            ) from exc


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class FunctionObject(_Frozen):
    """A callable function offered to the model.

    ``parameters`` is an opaque JSON Schema value; its shape is defined by the
    provider and the model, not by this library.
    """

    name: str
    description: str | None = None
    parameters: Any = None


class Tool(_Frozen):
    type: Literal["function"] = "function"
    function: FunctionObject


class ChatCompletionMessageToolCallFunction(_Frozen):
    """Function name and JSON-encoded arguments chosen by the model."""

    name: str
    arguments: str = ""

    def parse_arguments(self) -> Any:
        """Decode :attr:`arguments`, which the gateway sends as a JSON string.

        Raises:
            DecodeError: The arguments are not valid JSON.
        """
        try:
            return json.loads(self.arguments)
        except json.JSONDecodeError as exc:
            raise DecodeError(
                f"Tool call '{self.name}' has malformed arguments: {exc}",
                original_error=exc,
            ) from exc


class ToolCallResponse(_Frozen):
    id: str
    type: Literal["function"] = "function"
    function: ChatCompletionMessageToolCallFunction


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Message(_Frozen):
    """One entry of a conversation.  Order within a conversation is significant.

    Args:
        role: Author of the message.
        content: Text content.  ``null`` on the wire (assistant messages that
            only carry tool calls) is read as an empty string.
        tool_calls: Tool invocations requested by the assistant.
        tool_call_id: For ``tool`` messages, the id of the call being answered.
        reasoning: Reasoning text some providers return alongside content.
    """

    role: MessageRole
    content: str = ""
    tool_calls: list[ToolCallResponse] | None = None
    tool_call_id: str | None = None
    reasoning: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _null_content(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str, tool_calls: list[ToolCallResponse] | None = None) -> "Message":
        return cls(role=MessageRole.ASSISTANT, content=content, tool_calls=tool_calls)

    @classmethod
    def tool(cls, content: str, tool_call_id: str) -> "Message":
        return cls(role=MessageRole.TOOL, content=content, tool_call_id=tool_call_id)


# ---------------------------------------------------------------------------
# Chat completions
# ---------------------------------------------------------------------------


class CreateChatCompletionRequest(_Frozen):
    """Body of ``POST /v1/chat/completions``.

    Serialise with ``model_dump(mode="json", exclude_none=True)`` so unset
    optional fields are left out of the request.
    """

    model: str
    messages: list[Message]
    tools: list[Tool] | None = None
    max_tokens: int | None = Field(default=None, gt=0)
    stream: bool | None = None


class CompletionUsage(_Frozen):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionChoice(_Frozen):
    index: int = 0
    message: Message
    finish_reason: str | None = None


class CreateChatCompletionResponse(_Frozen):
    id: str
    object: str = "chat.completion"
    created: int = 0
    model: str
    choices: list[ChatCompletionChoice] = Field(default_factory=list)
    usage: CompletionUsage | None = None

    @property
    def first_content(self) -> str | None:
        """Content of ``choices[0]``, or ``None`` when no choice is present yet."""
        if not self.choices:
            return None
        return self.choices[0].message.content


class ChatCompletionToolCallChunkFunction(_Frozen):
    name: str | None = None
    arguments: str | None = None


class ChatCompletionToolCallChunk(_Frozen):
    """A fragment of a tool call; fragments sharing ``index`` belong together."""

    index: int = 0
    id: str | None = None
    type: Literal["function"] | None = None
    function: ChatCompletionToolCallChunkFunction | None = None


class ChatCompletionStreamDelta(_Frozen):
    """Partial message fragment.  Any subset of the fields may be present."""

    role: MessageRole | None = None
    content: str | None = None
    tool_calls: list[ChatCompletionToolCallChunk] | None = None
    reasoning: str | None = None


class ChatCompletionStreamChoice(_Frozen):
    index: int = 0
    delta: ChatCompletionStreamDelta = Field(default_factory=ChatCompletionStreamDelta)
    finish_reason: str | None = None


class CreateChatCompletionStreamResponse(_Frozen):
    """One decoded streaming chunk.  ``usage`` only appears on the terminal chunk."""

    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None
    choices: list[ChatCompletionStreamChoice] = Field(default_factory=list)
    usage: CompletionUsage | None = None

    @property
    def first_delta_content(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].delta.content

    @property
    def finish_reason(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].finish_reason


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class Model(_Frozen):
    id: str
    object: str = "model"
    created: int = 0
    owned_by: str = ""
    served_by: Provider | None = None


class ListModelsResponse(_Frozen):
    """Models known to the gateway, optionally scoped to one provider."""

    provider: Provider | None = None
    object: str = "list"
    data: list[Model] = Field(default_factory=list)


class MCPTool(_Frozen):
    name: str
    description: str = ""
    server: str = ""
    input_schema: Any = None


class ListToolsResponse(_Frozen):
    object: str = "list"
    data: list[MCPTool] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_model(model_type: type[_M], raw: str | bytes | dict[str, Any]) -> _M:
    """Decode *raw* JSON text or an already-parsed mapping into *model_type*.

    Raises:
        DecodeError: *raw* is not valid JSON or does not satisfy the schema,
            including unknown :class:`MessageRole` / :class:`Provider` values.
    """
    try:
        if isinstance(raw, str | bytes):
            return model_type.model_validate_json(raw)
        return model_type.model_validate(raw)
    except ValidationError as exc:
        raise DecodeError(
            f"Failed to decode {model_type.__name__}: {exc}",
            original_error=exc,
        ) from exc
