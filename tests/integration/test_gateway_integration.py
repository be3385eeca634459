"""Integration tests against a live Inference Gateway.

These tests make *real* HTTP calls.  All are marked ``integration`` and are
excluded from the default ``pytest`` run:

    INFERENCE_GATEWAY_BASE_URL=http://localhost:8080 pytest -m integration -v

``INFERENCE_GATEWAY_MODEL`` and ``INFERENCE_GATEWAY_PROVIDER`` pick the model
used for chat completions (defaults: ``llama3.2`` on ``ollama``).
"""

# Load .env before reading the environment below.
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent.parent / ".env")

import os  # noqa: E402

import pytest  # noqa: E402

from inference_gateway import (  # noqa: E402
    ForbiddenError,
    InferenceGatewayClient,
    Message,
    Provider,
)

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not os.environ.get("INFERENCE_GATEWAY_BASE_URL"),
        reason="INFERENCE_GATEWAY_BASE_URL not set, no gateway to talk to",
    ),
]

_PROVIDER = os.environ.get("INFERENCE_GATEWAY_PROVIDER", "ollama")
_MODEL = os.environ.get("INFERENCE_GATEWAY_MODEL", "llama3.2")


@pytest.fixture
def client() -> InferenceGatewayClient:
    return InferenceGatewayClient.from_env()


async def test_health_check(client: InferenceGatewayClient) -> None:
    assert await client.health_check() is True


async def test_list_models(client: InferenceGatewayClient) -> None:
    response = await client.list_models()
    assert response.object == "list"


async def test_list_models_by_provider(client: InferenceGatewayClient) -> None:
    provider = Provider.parse(_PROVIDER)
    response = await client.list_models_by_provider(provider)
    assert all(m.served_by in (None, provider) for m in response.data)


async def test_generate_content(client: InferenceGatewayClient) -> None:
    response = await client.with_max_tokens(32).generate_content(
        _PROVIDER, _MODEL, [Message.user("Reply with the single word: pong")]
    )
    assert response.choices
    assert response.first_content


async def test_generate_content_stream(client: InferenceGatewayClient) -> None:
    async with await client.with_max_tokens(32).generate_content_stream(
        _PROVIDER, _MODEL, [Message.user("Count from one to three")]
    ) as stream:
        content = await stream.collect_content()

    assert content
    assert stream.closed


async def test_list_tools(client: InferenceGatewayClient) -> None:
    try:
        tools = await client.list_tools()
    except ForbiddenError:
        pytest.skip("MCP is not exposed by this gateway")
    assert tools.object == "list"
