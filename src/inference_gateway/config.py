from dataclasses import dataclass

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from inference_gateway.errors import ConfigError
from inference_gateway.models import Tool

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 30.0


class Settings(BaseSettings):
    """Client settings read from ``INFERENCE_GATEWAY_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="INFERENCE_GATEWAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(default=DEFAULT_BASE_URL)
    # Stored as SecretStr so the token never shows up in reprs or logs
    token: SecretStr | None = Field(default=None)
    timeout: float = Field(default=DEFAULT_TIMEOUT)
    max_tokens: int | None = Field(default=None)
    log_level: str = Field(default="INFO")


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration of an :class:`~inference_gateway.client.InferenceGatewayClient`.

    Args:
        base_url: Gateway root, e.g. ``"http://localhost:8080"``.  A trailing
            ``/`` is removed.
        token: Bearer token sent as ``Authorization: Bearer <token>``.
        tools: Default tool set attached to every chat-completion request.
        max_tokens: Default ``max_tokens`` attached to chat-completion requests.
        timeout: Transport timeout in seconds, passed through to ``httpx``.

    Raises:
        ConfigError: If any field fails validation.
    """

    base_url: str
    token: str | None = None
    tools: tuple[Tool, ...] | None = None
    max_tokens: int | None = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        base_url = self.base_url.strip().rstrip("/")
        if not base_url:
            raise ConfigError("base_url must be a non-empty string")
        if not base_url.startswith(("http://", "https://")):
            raise ConfigError(f"base_url must be an http(s) URL, got '{self.base_url}'")

        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ConfigError(f"max_tokens must be a positive integer, got {self.max_tokens}")

        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")

        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "base_url", base_url)
        if self.tools is not None:
            object.__setattr__(self, "tools", tuple(self.tools))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ClientConfig":
        """Build a config from :class:`Settings`, reading the environment if none is given."""
        settings = settings or Settings()
        return cls(
            base_url=settings.base_url,
            token=settings.token.get_secret_value() if settings.token is not None else None,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
        )
