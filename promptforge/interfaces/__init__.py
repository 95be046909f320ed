"""Abstract base classes for pluggable strategies."""

from promptforge.interfaces.gateway import BaseModelGateway, GatewayError, ModelInfo

__all__ = [
    "BaseModelGateway",
    "GatewayError",
    "ModelInfo",
]
