"""FastAPI application entry point.

This module initialises the FastAPI app, configures logging and
registers API routes.  The `uvicorn` ASGI server can point to
``chat_relay.main:app`` to serve the application.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .utils.logger import setup_logging
from .config.app_config import AppConfig, get_app_config
from .controllers.chat_controller import router as chat_router
from .utils.error_handler import RelayError, relay_exception_handler


def create_app(app_config: AppConfig | None = None) -> FastAPI:
    """Create and configure a FastAPI application."""
    app_config = app_config or get_app_config()
    setup_logging(app_config)

    app = FastAPI(title="Chat Relay", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RelayError, relay_exception_handler)

    # The mount path only prefixes the API; /health stays at the root
    app.include_router(chat_router, prefix=app_config.api_prefix)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        logger.debug("Health check invoked")
        return {"status": "ok"}

    return app


# Create an application instance for ASGI servers
app = create_app()
