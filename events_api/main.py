"""
FastAPI application factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.errors import register_exception_handlers
from .api.router import api_router
from .core.config import Settings, ensure_signing_key, get_settings
from .core.logging import configure_logging
from .core.security import PasswordHasher
from .db.database import build_engine, build_session_factory
from .infrastructure.external_services.rate_limiter import RateLimiter

# Import all ORM models so the mappers are configured before the first query
from .infrastructure import orm  # noqa: F401


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings: Settings = app.state.settings
    # No signing key, no service
    ensure_signing_key(settings)

    engine = build_engine(settings)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    if settings.RATE_LIMIT_ENABLED:
        app.state.rate_limiter = RateLimiter.from_settings(settings)

    logger.info("Starting %s %s (%s)", settings.PROJECT_NAME, settings.VERSION, settings.ENVIRONMENT)
    try:
        yield
    finally:
        logger.info("Shutting down %s", settings.PROJECT_NAME)
        if app.state.rate_limiter is not None:
            await app.state.rate_limiter.close()
        engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application; settings default to the environment"""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.DESCRIPTION,
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.password_hasher = PasswordHasher(settings.BCRYPT_ROUNDS)
    app.state.rate_limiter = None

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {"message": settings.PROJECT_NAME, "version": settings.VERSION}

    return app


if __name__ == "__main__":
    uvicorn.run(
        "events_api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )
