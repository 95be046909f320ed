"""Unit tests for configuration and the gateway component factory."""

import pytest

from promptforge.core.config import Settings
from promptforge.core.factory import DEEPSEEK_MODELS, ComponentFactory
from promptforge.strategies.gateways import (
    AnthropicGateway,
    GeminiGateway,
    OpenAICompatibleGateway,
)
from promptforge.strategies.template_engine import GatewayProvider


@pytest.fixture
def settings(tmp_path):
    """Settings with no server-side keys."""
    return Settings(
        log_dir=tmp_path / "logs",
        google_api_key=None,
        anthropic_api_key=None,
        openai_api_key=None,
        deepseek_api_key=None,
        openrouter_api_key=None,
    )


class TestSettings:
    """Test suite for Settings helpers."""

    def test_log_level_normalized(self, tmp_path):
        """Test that the log level is upper-cased."""
        assert Settings(log_dir=tmp_path, log_level="debug").log_level == "DEBUG"

    def test_log_dir_created(self, tmp_path):
        """Test that the log directory is created on load."""
        settings = Settings(log_dir=tmp_path / "nested" / "logs")
        assert settings.log_dir.is_dir()

    def test_is_sqlite(self, tmp_path):
        """Test database backend detection."""
        assert Settings(log_dir=tmp_path, database_url="sqlite+aiosqlite:///x.db").is_sqlite
        assert not Settings(log_dir=tmp_path, database_url="postgresql+asyncpg://u:p@h/db").is_sqlite

    def test_server_api_key(self, settings):
        """Test per-provider server key lookup."""
        configured = settings.model_copy(update={"deepseek_api_key": "ds-1"})
        assert configured.server_api_key(GatewayProvider.DEEPSEEK) == "ds-1"
        assert configured.server_api_key(GatewayProvider.OPENAI) is None


class TestComponentFactory:
    """Test suite for ComponentFactory."""

    def test_missing_key_raises(self, settings):
        """Test that a provider without any key cannot be built."""
        factory = ComponentFactory(settings)
        with pytest.raises(ValueError, match="API key is required"):
            factory.get_gateway(GatewayProvider.OPENAI)

    def test_request_key_wins_over_server_key(self, settings):
        """Test key precedence."""
        factory = ComponentFactory(settings.model_copy(update={"openai_api_key": "server"}))

        assert factory.resolve_api_key(GatewayProvider.OPENAI, "request") == "request"
        assert factory.resolve_api_key(GatewayProvider.OPENAI) == "server"
        assert factory.resolve_api_key(GatewayProvider.GOOGLE) is None

    def test_default_provider_from_settings(self, settings):
        """Test that an unnamed provider uses the configured default."""
        factory = ComponentFactory(settings.model_copy(update={"google_api_key": "g-1"}))
        gateway = factory.get_gateway()

        assert isinstance(gateway, GeminiGateway)
        assert gateway.provider == "google"

    def test_provider_by_string_value(self, settings):
        """Test that providers can be named by their string value."""
        gateway = ComponentFactory(settings).get_gateway("anthropic", api_key="a-1")
        assert isinstance(gateway, AnthropicGateway)

    def test_unknown_provider_raises(self, settings):
        """Test that unknown provider names are rejected."""
        with pytest.raises(ValueError):
            ComponentFactory(settings).get_gateway("cohere", api_key="k")

    @pytest.mark.parametrize(
        ("provider", "default_model"),
        [
            (GatewayProvider.OPENAI, "gpt-4-turbo-preview"),
            (GatewayProvider.DEEPSEEK, "deepseek-chat"),
            (GatewayProvider.OPENROUTER, "anthropic/claude-3-haiku"),
        ],
    )
    def test_openai_compatible_providers(self, settings, provider, default_model):
        """Test that OpenAI-wire providers share one strategy."""
        gateway = ComponentFactory(settings).get_gateway(provider, api_key="k")

        assert isinstance(gateway, OpenAICompatibleGateway)
        assert gateway.provider == provider.value
        assert gateway.default_model == default_model

    def test_deepseek_lists_static_models(self, settings):
        """Test that DeepSeek uses its fixed model list."""
        import asyncio

        gateway = ComponentFactory(settings).get_gateway(GatewayProvider.DEEPSEEK, api_key="k")
        assert asyncio.run(gateway.list_models()) == DEEPSEEK_MODELS
