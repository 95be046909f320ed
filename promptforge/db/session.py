"""Database session management for the async template store.

Provides async session creation and dependency injection for FastAPI.
PostgreSQL (asyncpg) is the production backend; SQLite (aiosqlite) is
accepted for local runs and tests.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel, select

from promptforge.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


SAMPLE_TEMPLATE = {
    "name": "Code Review Request",
    "content": (
        "Review the following {{language}} code for {{focus}}.\n\n"
        "{{code}}\n\n"
        "List concrete issues first, then suggested changes."
    ),
    "is_core": True,
    "domain": "Code",
    "provider_type": "OpenAI",
    "model_type": "GPT-4",
    "role_type": "Developer",
    "methodologies": ["Code Review", "SOLID Principles"],
}


# Global engine and session maker
_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Get or create the async database engine.

    Args:
        settings: Optional settings. If None, uses global settings.

    Returns:
        The async SQLAlchemy engine.
    """
    global _engine

    try:
        if _engine is None:
            settings = settings or get_settings()

            logger.info(f"Creating async database engine: {settings.database_url}")

            engine_kwargs: dict[str, Any] = {
                "echo": settings.log_level == "DEBUG",
                "future": True,
                "pool_pre_ping": True,
            }
            # SQLite drivers use a non-queue pool that rejects sizing arguments
            if not settings.is_sqlite:
                engine_kwargs["pool_size"] = settings.db_pool_size
                engine_kwargs["max_overflow"] = settings.db_max_overflow

            _engine = create_async_engine(settings.database_url, **engine_kwargs)

            logger.info("Database engine created successfully")

        return _engine

    except Exception as e:
        logger.error(f"Failed to create database engine: {e}", exc_info=True)
        raise


def get_session_maker(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Get or create the async session maker.

    Args:
        settings: Optional settings. If None, uses global settings.

    Returns:
        The async session maker.
    """
    global _async_session_maker

    try:
        if _async_session_maker is None:
            engine = get_engine(settings)

            _async_session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autocommit=False,
                autoflush=False,
            )

            logger.info("Session maker created successfully")

        return _async_session_maker

    except Exception as e:
        logger.error(f"Failed to create session maker: {e}", exc_info=True)
        raise


async def get_async_session(settings: Settings | None = None) -> AsyncGenerator[AsyncSession, None]:
    """Dependency injection for FastAPI to get async database sessions.

    Args:
        settings: Optional settings. If None, uses global settings.

    Yields:
        An async database session.

    Example:
        ```python
        @router.get("/{template_id}")
        async def get_template(template_id: int, session: AsyncSession = Depends(get_async_session)):
            return await session.get(Template, template_id)
        ```
    """
    session_maker = get_session_maker(settings)
    async with session_maker() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}", exc_info=True)
            await session.rollback()
            raise
        except Exception as e:
            logger.error(f"Unexpected error in session: {e}", exc_info=True)
            await session.rollback()
            raise
        finally:
            try:
                await session.close()
            except Exception as e:
                logger.error(f"Error closing session: {e}", exc_info=True)


async def create_all_tables(settings: Settings | None = None) -> None:
    """Create all database tables.

    This uses SQLAlchemy's metadata.create_all for table creation.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        # Import models to ensure they're registered with SQLModel metadata
        from promptforge.db import models  # noqa: F401

        engine = get_engine(settings)

        logger.info("Creating database tables...")

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        logger.info("Database tables created successfully")

    except Exception as e:
        logger.error(f"Failed to create database tables: {e}", exc_info=True)
        raise


async def drop_all_tables(settings: Settings | None = None) -> None:
    """Drop all database tables.

    WARNING: This will delete all templates. Use with caution,
    typically only in test environments.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        from promptforge.db import models  # noqa: F401

        engine = get_engine(settings)

        logger.warning("Dropping all database tables...")

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)

        logger.warning("All database tables dropped")

    except Exception as e:
        logger.error(f"Failed to drop database tables: {e}", exc_info=True)
        raise


async def init_db(settings: Settings | None = None) -> None:
    """Initialize the database.

    Creates tables and, when ``seed_sample_templates`` is enabled and the
    store is empty, inserts one sample template.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    try:
        from promptforge.db.models import Template

        settings = settings or get_settings()
        await create_all_tables(settings)

        if not settings.seed_sample_templates:
            return

        session_maker = get_session_maker(settings)
        async with session_maker() as session:
            try:
                result = await session.execute(select(Template.id).limit(1))
                if result.scalar_one_or_none() is None:
                    logger.info("Seeding sample template...")
                    sample = Template.model_validate({**SAMPLE_TEMPLATE, "order": 0})
                    session.add(sample)
                    await session.commit()
                    logger.info(f"Created sample template: {sample.id}")

            except Exception as e:
                logger.error(f"Error seeding sample template: {e}", exc_info=True)
                await session.rollback()
                raise

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise


async def close_db() -> None:
    """Close the database engine and all connections."""
    global _engine, _async_session_maker

    try:
        if _engine is not None:
            logger.info("Closing database engine...")
            await _engine.dispose()
            _engine = None
            _async_session_maker = None
            logger.info("Database engine closed")

    except Exception as e:
        logger.error(f"Error closing database engine: {e}", exc_info=True)
        raise
