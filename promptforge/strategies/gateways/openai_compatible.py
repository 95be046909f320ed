"""OpenAI-compatible model gateway.

Uses the OpenAI SDK against any chat-completions endpoint that speaks the
OpenAI wire format. OpenAI itself, DeepSeek and OpenRouter are all served by
this one strategy with a different base URL and default model.
"""

import logging

from openai import APIStatusError, AsyncOpenAI, OpenAIError

from promptforge.interfaces.gateway import BaseModelGateway, GatewayError, ModelInfo

logger = logging.getLogger(__name__)


class OpenAICompatibleGateway(BaseModelGateway):
    """Gateway implementation using the OpenAI chat completions API.

    Attributes:
        client: The async OpenAI client instance.
        default_model: Model used when a call does not name one.
    """

    def __init__(
        self,
        provider: str,
        api_key: str,
        default_model: str,
        base_url: str | None = None,
        timeout: float = 60.0,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        default_headers: dict[str, str] | None = None,
        model_prefix: str | None = None,
        static_models: list[ModelInfo] | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            provider: Gateway provider name used in logs and errors.
            api_key: API key for the upstream service.
            default_model: Model used when ``complete`` is called without one.
            base_url: Optional custom base URL (DeepSeek, OpenRouter).
            timeout: Request timeout in seconds.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            default_headers: Extra headers sent with every request.
            model_prefix: Only list models whose id starts with this prefix.
            static_models: Fixed model list for providers without a listing endpoint.
            client: Pre-built client, mainly for tests.
        """
        self._provider = provider
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            default_headers=default_headers,
        )
        self._default_model = default_model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._model_prefix = model_prefix
        self._static_models = static_models

    async def complete(self, prompt: str, model: str | None = None) -> str:
        """Send the prompt as a single user message.

        Args:
            prompt: The full text to send.
            model: Model id, defaults to the gateway default.

        Returns:
            The assistant message content.

        Raises:
            GatewayError: If the API call fails or returns no content.
        """
        model = model or self._default_model
        logger.info(f"Calling {self._provider} chat completions: model={model}, chars={len(prompt)}")

        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except APIStatusError as e:
            logger.error(f"{self._provider} API error: {e.status_code} - {e.message}")
            raise GatewayError(self._provider, e.message, status_code=e.status_code) from e
        except OpenAIError as e:
            logger.error(f"{self._provider} API error: {e}")
            raise GatewayError(self._provider, str(e)) from e

        if not response.choices or not response.choices[0].message.content:
            raise GatewayError(
                self._provider, f"Unexpected response format from {self._provider} API"
            )

        content = response.choices[0].message.content
        logger.info(f"{self._provider} response received: {len(content)} chars")
        return content

    async def list_models(self) -> list[ModelInfo]:
        """List models, filtered by the configured id prefix.

        Raises:
            GatewayError: If the listing call fails.
        """
        if self._static_models is not None:
            return list(self._static_models)

        try:
            page = await self._client.models.list()
        except OpenAIError as e:
            logger.error(f"Failed to fetch {self._provider} models: {e}")
            raise GatewayError(self._provider, f"Failed to fetch models: {e}") from e

        models = []
        for item in page.data:
            if self._model_prefix and not item.id.startswith(self._model_prefix):
                continue
            display_name = getattr(item, "name", None) or item.id
            models.append(ModelInfo(id=item.id, display_name=display_name, provider=self._provider))

        logger.debug(f"Fetched {len(models)} {self._provider} models")
        return models

    @property
    def provider(self) -> str:
        """Return the gateway provider name."""
        return self._provider

    @property
    def default_model(self) -> str:
        """Return the default model id."""
        return self._default_model
