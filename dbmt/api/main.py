"""FastAPI application entry point."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings
from ..orchestrator import MigrationOrchestrator
from ..storage import MigrationStore, create_store
from .auth import TokenAuthenticator
from .errors import register_error_handlers
from .routes import orchestrator, validation

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[MigrationStore] = None
) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Service settings (defaults to the environment)
        store: Table storage (defaults to the store selected by settings)
    """
    settings = settings or Settings.from_env()
    store = store if store is not None else create_store(settings.data_file)

    app = FastAPI(
        title="Database Migration Tool API",
        description="Migration orchestration and validation service for the DBMT dashboard",
        version=__version__,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.authenticator = TokenAuthenticator(settings.api_tokens)
    app.state.orchestrator = MigrationOrchestrator(
        store, progress_interval=settings.progress_interval
    )

    # CORS middleware for the dashboard
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    register_error_handlers(app)

    app.include_router(
        orchestrator.router, prefix="/migration-orchestrator", tags=["migrations"]
    )
    app.include_router(
        validation.router, prefix="/validation-service", tags=["validation"]
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    logger.debug(f"API created with {type(store).__name__}")
    return app
