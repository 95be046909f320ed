"""Anthropic model gateway.

Calls the Messages API directly with httpx.
"""

import logging
from typing import Any

import httpx

from promptforge.interfaces.gateway import BaseModelGateway, GatewayError, ModelInfo

logger = logging.getLogger(__name__)

ANTHROPIC_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_VERSION = "2023-06-01"

ANTHROPIC_MODELS = [
    ModelInfo(id="claude-3-7-sonnet-20250219", display_name="Claude 3.7 Sonnet", provider="anthropic"),
]


class AnthropicGateway(BaseModelGateway):
    """Gateway implementation for the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        default_model: str = "claude-3-7-sonnet-20250219",
        base_url: str = ANTHROPIC_BASE_URL,
        timeout: float = 60.0,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._default_model = default_model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._transport = transport

    async def complete(self, prompt: str, model: str | None = None) -> str:
        """Send the prompt as a single user message.

        Raises:
            GatewayError: If the API call fails or the response has no text.
        """
        model = model or self._default_model
        payload = {
            "model": model,
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        logger.info(f"Calling Anthropic messages: model={model}, chars={len(prompt)}")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self._base_url}/messages", headers=headers, json=payload)
                response.raise_for_status()
                data: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Anthropic API error: {e.response.status_code} - {e.response.text}")
            raise GatewayError(
                "anthropic", e.response.text, status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Anthropic request failed: {e}")
            raise GatewayError("anthropic", str(e)) from e
        except ValueError as e:
            raise GatewayError("anthropic", "Invalid JSON in Anthropic response") from e

        text_blocks = [
            block.get("text", "")
            for block in data.get("content", [])
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        if not text_blocks or not text_blocks[0]:
            raise GatewayError("anthropic", "Unexpected response format from Anthropic API")
        return "".join(text_blocks)

    async def list_models(self) -> list[ModelInfo]:
        """Return the supported Anthropic models."""
        return list(ANTHROPIC_MODELS)

    @property
    def provider(self) -> str:
        """Return the gateway provider name."""
        return "anthropic"
