from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.deps import get_expiry_reaper
from .api.errors import register_exception_handlers
from .api.routers.auth import router as auth_router
from .api.routers.debug import router as debug_router
from .api.routers.health import router as health_router
from .api.routers.profile import router as profile_router
from .api.routers.sessions import router as sessions_router
from .infrastructure.jobs.session_reaper_scheduler import SessionReaperScheduler
from .shared.config import get_settings


settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    scheduler = None
    if settings.session_reaper_enabled and settings.postgres_dsn:
        scheduler = SessionReaperScheduler(
            reaper=get_expiry_reaper(),
            interval_seconds=settings.session_reaper_interval_seconds,
        )
        scheduler.start()
    else:
        logger.info(
            "main: session_reaper_disabled enabled=%s dsn_configured=%s",
            settings.session_reaper_enabled,
            bool(settings.postgres_dsn),
        )
    try:
        yield
    finally:
        if scheduler is not None:
            await asyncio.to_thread(scheduler.stop)


app = FastAPI(title="Mobile Auth API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allow_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(sessions_router)
app.include_router(debug_router)
