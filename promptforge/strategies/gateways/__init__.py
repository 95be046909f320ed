"""Concrete model gateway implementations."""

from promptforge.strategies.gateways.anthropic import AnthropicGateway
from promptforge.strategies.gateways.gemini import GeminiGateway
from promptforge.strategies.gateways.openai_compatible import OpenAICompatibleGateway

__all__ = [
    "AnthropicGateway",
    "GeminiGateway",
    "OpenAICompatibleGateway",
]
