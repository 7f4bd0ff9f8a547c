"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from devwars.config import get_settings
from devwars.database import close_db, init_db
from devwars.games.router import router as games_router
from devwars.health.router import router as health_router
from devwars.middleware import setup_middleware
from devwars.redis_client import connect_redis, disconnect_redis
from devwars.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url, echo=settings.database_echo)
    await connect_redis(settings)
    logger.info("startup_complete", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await disconnect_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="DevWars API",
        description="Backend API for DevWars users, games and leaderboards",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(games_router)

    return app


app = create_app()
