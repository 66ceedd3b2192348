"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mindos.achievements.router import router as achievements_router
from mindos.clients import close_clients, init_clients
from mindos.community.router import router as community_router
from mindos.config import get_settings
from mindos.database import close_db, init_db
from mindos.gamification.router import router as gamification_router
from mindos.health.router import router as health_router
from mindos.leaderboard.router import router as leaderboard_router
from mindos.lessons.router import router as lessons_router
from mindos.middleware import setup_middleware
from mindos.missions.router import router as missions_router
from mindos.redis_client import close_redis, init_redis
from mindos.referrals.router import router as referrals_router
from mindos.users.router import router as users_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url, settings.redis_max_connections)
    await init_clients(settings)

    yield

    await close_clients()
    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="AI Mind OS API",
        description="Progression core for AI Mind OS: XP, levels, streaks, missions, lessons and referrals",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(gamification_router)
    app.include_router(missions_router)
    app.include_router(lessons_router)
    app.include_router(leaderboard_router)
    app.include_router(referrals_router)
    app.include_router(achievements_router)
    app.include_router(community_router)

    return app


app = create_app()
