"""Abstract base class for model gateway strategies.

The Strategy Pattern allows different upstream LLM providers
to be used interchangeably for prompt enhancement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ModelInfo:
    """A model offered by an upstream provider.

    Attributes:
        id: Provider-side model identifier.
        display_name: Human-readable name.
        provider: Gateway provider value (e.g. "openai").
    """

    id: str
    display_name: str
    provider: str


class BaseModelGateway(ABC):
    """Abstract base class for model gateway strategies.

    All concrete gateway implementations must inherit from this class
    and implement the required methods.

    Example:
        ```python
        class EchoGateway(BaseModelGateway):
            async def complete(self, prompt: str, model: str | None = None) -> str:
                return prompt

            async def list_models(self) -> list[ModelInfo]:
                return []

            @property
            def provider(self) -> str:
                return "echo"
        ```
    """

    @abstractmethod
    async def complete(self, prompt: str, model: str | None = None) -> str:
        """Send a prompt upstream and return the generated text.

        Args:
            prompt: The full text to send.
            model: Provider-side model id. If None, the gateway default is used.

        Returns:
            The text generated by the model.

        Raises:
            GatewayError: If the upstream call fails or the response is malformed.
        """
        ...

    @abstractmethod
    async def list_models(self) -> list[ModelInfo]:
        """List the models available to the configured API key.

        Raises:
            GatewayError: If the upstream call fails.
        """
        ...

    @property
    @abstractmethod
    def provider(self) -> str:
        """Return the gateway provider name."""
        ...


class GatewayError(Exception):
    """Exception raised when an upstream provider call fails.

    Attributes:
        provider: The provider that failed.
        status_code: Upstream HTTP status, when there was one.
    """

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{provider} API error: {message}")
        self.provider = provider
        self.status_code = status_code
