"""FastAPI application factory."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from ethential import __version__
from ethential.auth import create_verifier
from ethential.config import Settings, get_settings
from ethential.construction import create_construction_client
from ethential.pipeline.orchestrator import PipelineOrchestrator
from ethential.pipeline.relay import RelayDispatcher

logger = logging.getLogger(__name__)


def build_orchestrator(settings: Settings, client: httpx.AsyncClient) -> PipelineOrchestrator:
    """Wire the configured backends around one shared HTTP client."""
    return PipelineOrchestrator(
        config=settings.pipeline_config(),
        verifier=create_verifier(settings, client),
        construction=create_construction_client(settings, client),
        dispatcher=RelayDispatcher(client),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    client = None

    # Startup
    if getattr(app.state, "orchestrator", None) is None:
        settings: Settings = app.state.settings
        if not settings.wallet_uri:
            logger.warning("WALLET_URI not set - relayed transactions will fail")
        client = httpx.AsyncClient(timeout=settings.http_timeout)
        app.state.orchestrator = build_orchestrator(settings, client)

    yield

    # Shutdown
    if client is not None:
        await client.aclose()
        app.state.orchestrator = None


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[PipelineOrchestrator] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        orchestrator: Pre-built orchestrator; skips backend wiring at startup
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Ethential API",
        description="Authenticated gateway for unsigned token transactions",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # Register routes
    from ethential.api.routes import health
    from ethential.web.controllers import tokens_router

    app.include_router(health.router, tags=["Health"])
    app.include_router(tokens_router, prefix=settings.api_prefix)

    # Static frontend, mounted last so API routes take precedence
    if settings.static_dir and os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


# Default app instance
app = create_app()
