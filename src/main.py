"""FastAPI application entry point."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api import matching, pantry, recipes
from src.config import get_settings
from src.services.session_cache import get_session_cache

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    # Startup: sweep expired matching sessions in the background
    sweeper = asyncio.create_task(
        get_session_cache().sweep_forever(settings.session_sweep_interval_seconds)
    )
    logger.info("Started session sweeper")
    yield
    # Shutdown: stop the sweeper
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper


app = FastAPI(
    title="Pantry Pilot API",
    description="Recipe suggestions from what is in your pantry, topped up with generated recipes",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register routers
app.include_router(recipes.router)
app.include_router(pantry.router)
app.include_router(matching.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "active_sessions": len(get_session_cache()),
    }
