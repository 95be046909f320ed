"""Google Gemini model gateway.

Calls the Generative Language REST API directly with httpx.
"""

import logging
from typing import Any

import httpx

from promptforge.interfaces.gateway import BaseModelGateway, GatewayError, ModelInfo

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiGateway(BaseModelGateway):
    """Gateway implementation for Google Gemini ``generateContent``."""

    def __init__(
        self,
        api_key: str,
        default_model: str = "gemini-1.5-pro",
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 60.0,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            api_key: Google AI Studio API key.
            default_model: Model used when a call does not name one.
            base_url: API base URL.
            timeout: Request timeout in seconds.
            temperature: Sampling temperature.
            max_tokens: Maximum output tokens.
            transport: Optional httpx transport, mainly for tests.
        """
        self._api_key = api_key
        self._default_model = default_model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def complete(self, prompt: str, model: str | None = None) -> str:
        """Generate content for a single-part prompt.

        Raises:
            GatewayError: If the API call fails or the response has no text.
        """
        model = (model or self._default_model).removeprefix("models/")
        url = f"{self._base_url}/models/{model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._temperature,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": self._max_tokens,
            },
        }

        logger.info(f"Calling Gemini generateContent: model={model}, chars={len(prompt)}")
        data = await self._request("POST", url, json=payload)

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GatewayError("google", "Unexpected response format from Gemini API") from e

        if not text:
            raise GatewayError("google", "Unexpected response format from Gemini API")
        return text

    async def list_models(self) -> list[ModelInfo]:
        """List models, keeping only those that support ``generateContent``."""
        data = await self._request("GET", f"{self._base_url}/models")
        models = []
        for item in data.get("models", []):
            if "generateContent" not in item.get("supportedGenerationMethods", []):
                continue
            models.append(
                ModelInfo(
                    id=item["name"],
                    display_name=item.get("displayName") or item["name"],
                    provider="google",
                )
            )
        return models

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        """Perform an authenticated request and return the decoded JSON body."""
        headers = {"Content-Type": "application/json", "x-goog-api-key": self._api_key}
        try:
            async with self._client() as client:
                response = await client.request(method, url, headers=headers, **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini API error: {e.response.status_code} - {e.response.text}")
            raise GatewayError(
                "google", e.response.text, status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise GatewayError("google", str(e)) from e
        except ValueError as e:
            raise GatewayError("google", "Invalid JSON in Gemini response") from e

    @property
    def provider(self) -> str:
        """Return the gateway provider name."""
        return "google"
