"""Operation set of the Inference Gateway API that callers program against."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

from inference_gateway.models import (
    CreateChatCompletionResponse,
    ListModelsResponse,
    ListToolsResponse,
    Message,
    Provider,
)

if TYPE_CHECKING:
    from inference_gateway.client import ChatCompletionStream


class InferenceGatewayAPI(ABC):
    """Abstract client for the Inference Gateway."""

    @abstractmethod
    async def list_models(self) -> ListModelsResponse:
        """List models from every configured provider."""

    @abstractmethod
    async def list_models_by_provider(self, provider: Provider | str) -> ListModelsResponse:
        """List models served by *provider*."""

    @abstractmethod
    async def generate_content(
        self,
        provider: Provider | str,
        model: str,
        messages: Sequence[Message],
    ) -> CreateChatCompletionResponse:
        """Generate a complete chat completion.

        Args:
            provider: Backend the gateway should route to.
            model: Model name as known to *provider*.
            messages: Conversation history, oldest first.
        """

    @abstractmethod
    async def generate_content_stream(
        self,
        provider: Provider | str,
        model: str,
        messages: Sequence[Message],
    ) -> "ChatCompletionStream":
        """Generate a chat completion as a lazy stream of Server-Sent Events.

        The returned stream must be exhausted or closed (``aclose()`` or
        ``async with``) so the underlying response is released.
        """

    @abstractmethod
    async def list_tools(self) -> ListToolsResponse:
        """List MCP tools exposed by the gateway."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Return ``True`` if the gateway answers its health endpoint with 200."""
