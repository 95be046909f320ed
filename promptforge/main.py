"""FastAPI application entry point.

Main application setup with middleware, routing, and lifecycle management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from promptforge import __version__
from promptforge.api.enhance import router as enhance_router
from promptforge.api.schemas import ErrorResponse
from promptforge.api.templates import router as templates_router
from promptforge.core.config import Settings, get_settings
from promptforge.core.logging_config import setup_logging
from promptforge.db.session import close_db, init_db

# Initialize logging before importing other modules
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events for proper resource management.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("Starting Prompt Template Manager API...")

    try:
        logger.info("Initializing database...")
        await init_db(settings)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("Shutting down Prompt Template Manager API...")

    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {e}", exc_info=True)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    try:
        settings = settings or get_settings()

        app = FastAPI(
            title=settings.app_title,
            description="Prompt template storage, rendering and LLM-assisted enhancement",
            version=__version__,
            lifespan=lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        # Store settings in app state
        app.state.settings = settings

        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        try:
            app.include_router(templates_router)
            app.include_router(enhance_router)
            logger.info("Registered templates and enhance routers")
        except Exception as e:
            logger.error(f"Failed to include router: {e}", exc_info=True)
            raise

        @app.get("/health", tags=["health"])
        async def health_check():
            """Health check endpoint for load balancers and monitoring."""
            return {
                "status": "healthy",
                "service": "promptforge-api",
                "version": __version__,
            }

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request, exc):
            """Handle Pydantic validation errors."""
            logger.warning(f"Validation error: {exc.errors()}")
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content={
                    "detail": "Validation error",
                    "errors": jsonable_encoder(exc.errors()),
                },
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(request, exc):
            """Handle uncaught exceptions."""
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=ErrorResponse(
                    detail="Internal server error",
                    error_code="INTERNAL_ERROR",
                ).model_dump(),
            )

        logger.info("FastAPI application created successfully")
        return app

    except Exception as e:
        logger.error(f"Failed to create FastAPI app: {e}", exc_info=True)
        raise


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "promptforge.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
