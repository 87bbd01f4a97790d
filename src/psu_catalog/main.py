"""
Application factory.

    uvicorn --factory psu_catalog.main:create_app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from sqlalchemy import text

from psu_catalog.api.v1.error_handlers import register_exception_handlers
from psu_catalog.api.v1.responses import success
from psu_catalog.api.v1.routes import api_router
from psu_catalog.auth.jwt_manager import JWTManager
from psu_catalog.auth.passwords import PasswordHasher
from psu_catalog.config.settings import Settings, get_settings
from psu_catalog.core.logging import RequestIDMiddleware, setup_logging
from psu_catalog.database.session import create_engine, create_session_maker, init_models

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, *, configure_logging: bool = True) -> FastAPI:
    settings = settings or get_settings()

    if configure_logging:
        setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = create_engine(settings)
        if settings.DB_AUTO_MIGRATE:
            await init_models(engine)

        app.state.engine = engine
        app.state.session_maker = create_session_maker(engine)
        logger.info("app.startup", extra={"env": settings.ENV, "service": settings.SERVICE_NAME})
        try:
            yield
        finally:
            await engine.dispose()
            logger.info("app.shutdown")

    app = FastAPI(title=settings.SERVICE_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.jwt_manager = JWTManager(settings.JWT_SECRET, settings.JWT_EXPIRE_HOURS)
    app.state.password_hasher = PasswordHasher(settings.BCRYPT_ROUNDS)

    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/health", tags=["health"])
    async def health(request: Request):
        database = "connected"
        try:
            async with request.app.state.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            logger.exception("health.database_unreachable")
            database = "disconnected"
        return success({"status": "ok", "database": database})

    return app

