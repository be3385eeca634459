"""Tests for ClientConfig, Settings, and the immutable with_* client configuration."""

import dataclasses

import pytest

from inference_gateway import InferenceGatewayClient
from inference_gateway.config import ClientConfig, Settings
from inference_gateway.errors import ConfigError
from inference_gateway.models import FunctionObject, Tool

_TOOL = Tool(function=FunctionObject(name="get_time", parameters={"type": "object"}))


# ---------------------------------------------------------------------------
# ClientConfig validation
# ---------------------------------------------------------------------------


class TestClientConfigValidation:
    def test_trailing_slash_removed(self) -> None:
        assert ClientConfig(base_url="http://gw:8080/").base_url == "http://gw:8080"

    def test_empty_base_url_raises(self) -> None:
        with pytest.raises(ConfigError, match="base_url"):
            ClientConfig(base_url="  ")

    def test_non_http_base_url_raises(self) -> None:
        with pytest.raises(ConfigError, match="http"):
            ClientConfig(base_url="ftp://gw")

    def test_zero_max_tokens_raises(self) -> None:
        with pytest.raises(ConfigError, match="max_tokens"):
            ClientConfig(base_url="http://gw", max_tokens=0)

    def test_non_positive_timeout_raises(self) -> None:
        with pytest.raises(ConfigError, match="timeout"):
            ClientConfig(base_url="http://gw", timeout=0)

    def test_tools_stored_as_tuple(self) -> None:
        config = ClientConfig(base_url="http://gw", tools=[_TOOL])  # type: ignore[arg-type]
        assert config.tools == (_TOOL,)

    def test_config_is_frozen(self) -> None:
        config = ClientConfig(base_url="http://gw")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.token = "x"  # type: ignore[misc]

    def test_fields_are_the_configuration_values(self) -> None:
        assert [f.name for f in dataclasses.fields(ClientConfig)] == [
            "base_url",
            "token",
            "tools",
            "max_tokens",
            "timeout",
        ]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("BASE_URL", "TOKEN", "TIMEOUT", "MAX_TOKENS"):
            monkeypatch.delenv(f"INFERENCE_GATEWAY_{name}", raising=False)
        settings = Settings(_env_file=None)
        assert settings.base_url == "http://localhost:8080"
        assert settings.token is None
        assert settings.timeout == 30.0

    def test_reads_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INFERENCE_GATEWAY_BASE_URL", "https://gateway.example.com")
        monkeypatch.setenv("INFERENCE_GATEWAY_TOKEN", "s3cret")
        monkeypatch.setenv("INFERENCE_GATEWAY_MAX_TOKENS", "256")

        settings = Settings(_env_file=None)

        assert settings.base_url == "https://gateway.example.com"
        assert settings.token is not None
        assert settings.token.get_secret_value() == "s3cret"
        assert "s3cret" not in repr(settings)
        assert settings.max_tokens == 256

    def test_client_config_from_settings(self) -> None:
        settings = Settings(_env_file=None, base_url="http://gw/", token="t", timeout=5)
        config = ClientConfig.from_settings(settings)
        assert config == ClientConfig(base_url="http://gw", token="t", timeout=5)

    def test_client_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INFERENCE_GATEWAY_BASE_URL", "http://env-gateway:9000")
        monkeypatch.setenv("INFERENCE_GATEWAY_TOKEN", "env-token")
        monkeypatch.chdir("/")  # keep a stray .env from leaking in

        client = InferenceGatewayClient.from_env()

        assert client.config.base_url == "http://env-gateway:9000"
        assert client.config.token == "env-token"


# ---------------------------------------------------------------------------
# with_* returns new clients
# ---------------------------------------------------------------------------


class TestClientConfiguration:
    def test_with_token_returns_new_client(self) -> None:
        base = InferenceGatewayClient("http://gw")
        authed = base.with_token("abc")

        assert authed is not base
        assert authed.config.token == "abc"
        assert base.config.token is None

    def test_chained_configuration(self) -> None:
        client = (
            InferenceGatewayClient("http://gw")
            .with_token("abc")
            .with_tools([_TOOL])
            .with_max_tokens(100)
            .with_timeout(2.5)
        )
        assert client.config == ClientConfig(
            base_url="http://gw", token="abc", tools=(_TOOL,), max_tokens=100, timeout=2.5
        )

    def test_with_tools_none_clears_tools(self) -> None:
        client = InferenceGatewayClient("http://gw", tools=[_TOOL]).with_tools(None)
        assert client.config.tools is None

    def test_invalid_update_raises(self) -> None:
        with pytest.raises(ConfigError):
            InferenceGatewayClient("http://gw").with_max_tokens(-5)
