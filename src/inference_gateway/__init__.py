"""Python client for the Inference Gateway.

Public surface area of the package.  Import from here rather than from the
individual submodules so internal structure can change freely.

Example::

    from inference_gateway import InferenceGatewayClient, Message, Provider

    client = InferenceGatewayClient("http://localhost:8080")
    async with await client.generate_content_stream(
        Provider.GROQ, "llama-3.3-70b-versatile", [Message.user("Hello")]
    ) as stream:
        async for chunk in stream.chunks():
            print(chunk.first_delta_content or "", end="")
"""

from inference_gateway.client import ChatCompletionStream, InferenceGatewayClient
from inference_gateway.config import ClientConfig, Settings
from inference_gateway.errors import (
    BadRequestError,
    ConfigError,
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
from inference_gateway.logging_config import configure_logging
from inference_gateway.models import (
    ChatCompletionChoice,
    ChatCompletionMessageToolCallFunction,
    ChatCompletionStreamChoice,
    ChatCompletionStreamDelta,
    ChatCompletionToolCallChunk,
    ChatCompletionToolCallChunkFunction,
    CompletionUsage,
    CreateChatCompletionRequest,
    CreateChatCompletionResponse,
    CreateChatCompletionStreamResponse,
    FunctionObject,
    ListModelsResponse,
    ListToolsResponse,
    MCPTool,
    Message,
    MessageRole,
    Model,
    Provider,
    Tool,
    ToolCallResponse,
    decode_model,
)
from inference_gateway.streaming import ServerSentEvent, SSEDecoder, aiter_sse

__version__ = "0.11.0"

__all__ = [
    # Client
    "InferenceGatewayAPI",
    "InferenceGatewayClient",
    "ChatCompletionStream",
    "ClientConfig",
    "Settings",
    "configure_logging",
    # Streaming
    "ServerSentEvent",
    "SSEDecoder",
    "aiter_sse",
    # Models
    "MessageRole",
    "Provider",
    "Message",
    "FunctionObject",
    "Tool",
    "ChatCompletionMessageToolCallFunction",
    "ToolCallResponse",
    "CreateChatCompletionRequest",
    "CreateChatCompletionResponse",
    "CreateChatCompletionStreamResponse",
    "ChatCompletionChoice",
    "ChatCompletionStreamChoice",
    "ChatCompletionStreamDelta",
    "ChatCompletionToolCallChunk",
    "ChatCompletionToolCallChunkFunction",
    "CompletionUsage",
    "Model",
    "ListModelsResponse",
    "MCPTool",
    "ListToolsResponse",
    "decode_model",
    # Errors
    "GatewayError",
    "TransportError",
    "HttpStatusError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "InternalServerError",
    "DecodeError",
    "ConfigError",
]
