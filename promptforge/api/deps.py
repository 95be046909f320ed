"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- Database sessions
- Per-request provider API keys
- Gateway construction
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from promptforge.core.config import Settings, get_settings
from promptforge.core.factory import ComponentFactory
from promptforge.db.session import get_async_session
from promptforge.interfaces.gateway import BaseModelGateway
from promptforge.strategies.template_engine.models import GatewayProvider

logger = logging.getLogger(__name__)


async def get_db(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Args:
        settings: Application settings.

    Yields:
        An async database session.
    """
    try:
        async for session in get_async_session(settings):
            yield session
    except (HTTPException, RequestValidationError):
        raise
    except Exception as e:
        logger.error(f"Error getting database session: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database connection error",
        ) from e


async def get_api_key(
    x_api_key: str | None = Header(default=None, description="Provider API key for this request"),
) -> str | None:
    """Dependency for extracting the caller's provider API key.

    A missing header is not an error here; the server-side key configured
    for the provider is used instead.

    Args:
        x_api_key: The key from the X-API-Key header.

    Returns:
        The stripped key, or None.
    """
    if x_api_key is None:
        return None
    return x_api_key.strip() or None


def get_factory(settings: Settings = Depends(get_settings)) -> ComponentFactory:
    """Dependency for the gateway component factory."""
    return ComponentFactory(settings)


def build_gateway(
    factory: ComponentFactory,
    provider: GatewayProvider | None,
    api_key: str | None,
) -> BaseModelGateway:
    """Build a gateway for a request, mapping a missing key to 401.

    Args:
        factory: The component factory.
        provider: Requested provider. If None, the configured default.
        api_key: Key from the request, if any.

    Returns:
        A gateway ready to call.

    Raises:
        HTTPException: 401 if neither the request nor the server has a key.
    """
    try:
        return factory.get_gateway(provider, api_key=api_key)
    except ValueError as e:
        logger.warning(f"Gateway unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        ) from e
