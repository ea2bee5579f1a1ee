"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartreader.api.auth_routes import router as auth_router
from smartreader.api.routes import router as books_router
from smartreader.core.config import settings
from smartreader.core.dependencies import Container, build_container

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the application around one container (one session).

    The auth-state listener is subscribed when the app starts and removed
    when it shuts down.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting SmartReader (gateway=%s)", settings.gateway_backend)
        app.state.container = container or build_container()
        await app.state.container.auth_listener.start()
        yield
        app.state.container.auth_listener.stop()
        logger.info("Shutting down SmartReader")

    app = FastAPI(
        title="SmartReader",
        description="Personal reading tracker",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(books_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
