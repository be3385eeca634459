# scripts/stream_chat.py
"""Manual smoke test: list models and stream one chat completion.

    python scripts/stream_chat.py [provider] [model]

Reads INFERENCE_GATEWAY_* settings from the environment or .env.  Needs
python-dotenv: pip install -e ".[scripts]"
"""

import asyncio
import sys

from dotenv import load_dotenv

load_dotenv(override=True)

from inference_gateway import (  # noqa: E402
    GatewayError,
    InferenceGatewayClient,
    Message,
    Settings,
    configure_logging,
)


async def main(provider: str, model: str) -> int:
    settings = Settings()
    configure_logging(settings.log_level, json=False)
    client = InferenceGatewayClient.from_env()

    if not await client.health_check():
        print(f"Gateway at {client.config.base_url} is not healthy")
        return 1

    models = await client.list_models_by_provider(provider)
    print(f"{len(models.data)} models served by {provider}:")
    for m in models.data:
        print(f"  {m.id}")

    print(f"\nStreaming from {provider}/{model}...")
    async with await client.generate_content_stream(
        provider,
        model,
        [Message.system("You are terse."), Message.user("Count to 5")],
    ) as stream:
        async for chunk in stream.chunks():
            print(chunk.first_delta_content or "", end="", flush=True)
            if chunk.finish_reason:
                print(f"\nFinish reason: {chunk.finish_reason}")
            if chunk.usage:
                print(f"Tokens: {chunk.usage.total_tokens}")
    print()
    return 0


if __name__ == "__main__":
    args = sys.argv[1:]
    provider = args[0] if args else "ollama"
    model = args[1] if len(args) > 1 else "llama3.2"
    try:
        sys.exit(asyncio.run(main(provider, model)))
    except GatewayError as exc:
        print(f"Gateway error: {exc}")
        sys.exit(1)
