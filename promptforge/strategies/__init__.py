"""Concrete strategy implementations."""

from promptforge.strategies.gateways import (
    AnthropicGateway,
    GeminiGateway,
    OpenAICompatibleGateway,
)

__all__ = [
    "AnthropicGateway",
    "GeminiGateway",
    "OpenAICompatibleGateway",
]
