"""FastAPI routers and dependencies."""

from promptforge.api.deps import build_gateway, get_api_key, get_db, get_factory
from promptforge.api.enhance import router as enhance_router
from promptforge.api.templates import router as templates_router

__all__ = [
    "build_gateway",
    "get_api_key",
    "get_db",
    "get_factory",
    "enhance_router",
    "templates_router",
]
