"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different gateway implementations at runtime based on the
provider named in a request or configured as the default.
"""

import logging

from promptforge.core.config import Settings, get_settings
from promptforge.interfaces.gateway import BaseModelGateway, ModelInfo
from promptforge.strategies.gateways import (
    AnthropicGateway,
    GeminiGateway,
    OpenAICompatibleGateway,
)
from promptforge.strategies.template_engine.models import GatewayProvider

logger = logging.getLogger(__name__)

DEEPSEEK_MODELS = [
    ModelInfo(id="deepseek-chat", display_name="Deepseek Chat", provider="deepseek"),
    ModelInfo(id="deepseek-coder", display_name="Deepseek Coder", provider="deepseek"),
]


class ComponentFactory:
    """Factory for creating gateway instances based on configuration.

    Gateways are cheap to build and carry a per-request API key, so
    unlike settings they are not cached.

    Example:
        ```python
        settings = get_settings()
        factory = ComponentFactory(settings)

        gateway = factory.get_gateway(GatewayProvider.OPENROUTER, api_key="sk-or-...")
        text = await gateway.complete("Rewrite this prompt ...")
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()

    def resolve_api_key(
        self,
        provider: GatewayProvider,
        api_key: str | None = None,
    ) -> str | None:
        """Pick the request key if present, else the server-side key."""
        return api_key or self._settings.server_api_key(provider)

    def get_gateway(
        self,
        provider: GatewayProvider | str | None = None,
        api_key: str | None = None,
    ) -> BaseModelGateway:
        """Get a gateway instance for the specified provider.

        Args:
            provider: The provider to call. If None, uses settings.
            api_key: Request API key. If None, the server-side key is used.

        Returns:
            A BaseModelGateway implementation instance.

        Raises:
            ValueError: If the provider is unknown or no API key is available.
        """
        provider = GatewayProvider(provider or self._settings.default_gateway_provider)
        key = self.resolve_api_key(provider, api_key)
        if not key:
            raise ValueError(f"API key is required for provider '{provider.value}'")

        s = self._settings
        common = {
            "timeout": s.gateway_timeout,
            "temperature": s.gateway_temperature,
            "max_tokens": s.gateway_max_tokens,
        }

        logger.info(f"Instantiating gateway: {provider.value}")

        match provider:
            case GatewayProvider.GOOGLE:
                return GeminiGateway(api_key=key, default_model=s.google_model, **common)
            case GatewayProvider.ANTHROPIC:
                return AnthropicGateway(api_key=key, default_model=s.anthropic_model, **common)
            case GatewayProvider.OPENAI:
                return OpenAICompatibleGateway(
                    provider=provider.value,
                    api_key=key,
                    default_model=s.openai_model,
                    base_url=s.openai_base_url,
                    model_prefix="gpt-",
                    **common,
                )
            case GatewayProvider.DEEPSEEK:
                return OpenAICompatibleGateway(
                    provider=provider.value,
                    api_key=key,
                    default_model=s.deepseek_model,
                    base_url=s.deepseek_base_url,
                    static_models=DEEPSEEK_MODELS,
                    **common,
                )
            case GatewayProvider.OPENROUTER:
                return OpenAICompatibleGateway(
                    provider=provider.value,
                    api_key=key,
                    default_model=s.openrouter_model,
                    base_url=s.openrouter_base_url,
                    default_headers={
                        "HTTP-Referer": s.openrouter_referer,
                        "X-Title": s.app_title,
                    },
                    **common,
                )
            case _:
                raise ValueError(
                    f"Unknown gateway provider: {provider}. "
                    f"Valid options: {', '.join(p.value for p in GatewayProvider)}"
                )
