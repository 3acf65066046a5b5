from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# IMPORTANT:
# This imports ALL models so SQLAlchemy registers tables + FKs correctly
import app.models  # noqa: F401
from app.core.config import Settings, get_settings
from app.core.db import Database
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.security import TokenService
from app.core.storage import FileStorage

# Routers
from app.routers.admin import router as admin_router
from app.routers.advertisements import router as advertisements_router
from app.routers.auth import users_router, ventures_router
from app.routers.coupons import router as coupons_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await app.state.db.create_all()
    logger.info("startup")
    yield
    await app.state.db.dispose()
    logger.info("shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    app = FastAPI(title="Coupons & Advertisements API", lifespan=lifespan)

    app.state.settings = settings
    app.state.db = Database(settings.DATABASE_URL)
    app.state.tokens = TokenService(settings)
    app.state.storage = FileStorage(settings.UPLOAD_DIR, settings.PUBLIC_BASE_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Accounts
    app.include_router(users_router)
    app.include_router(ventures_router)
    app.include_router(admin_router)

    # Lifecycle
    app.include_router(coupons_router)
    app.include_router(advertisements_router)

    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    return app
