"""
nomoji FastAPI application entry point.

Per-user emoji usage configuration, rendered into rule files for AI coding assistants.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nomoji import __version__
from nomoji.config import get_settings
from nomoji.db.session import check_db_connection, engine

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization", "X-Request-Id"]
CORS_EXPOSE_HEADERS = ["X-Request-Id", "X-Response-Time", "Server-Timing"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    settings = get_settings()
    logger.info("nomoji starting: environment=%s", settings.environment.value)
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        if settings.is_sqlite:
            # Local runs and tests have no migration step.
            from nomoji.db.session import Base
            import nomoji.models  # noqa: F401

            Base.metadata.create_all(bind=engine)

        yield
    finally:
        logger.info("nomoji shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def _add_middleware(app: FastAPI) -> None:
    """Install middleware. Starlette wraps in reverse order of registration, so the
    effective order from the outside in is: security headers, CORS, size limit,
    observability."""
    from nomoji.middleware.observability import ObservabilityMiddleware
    from nomoji.middleware.security import (
        RequestSizeLimitMiddleware,
        SecurityHeadersMiddleware,
    )

    settings = get_settings()
    profile = settings.profile

    app.add_middleware(ObservabilityMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(profile.cors_origins),
        allow_origin_regex=".*" if profile.cors_allow_any_origin else None,
        allow_credentials=True,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
        expose_headers=CORS_EXPOSE_HEADERS,
        max_age=86400,
    )
    app.add_middleware(SecurityHeadersMiddleware)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Control emoji usage in AI-generated code and documentation",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    from nomoji.api.errors import register_exception_handlers

    register_exception_handlers(app)
    _add_middleware(app)

    # Mount API routes (every /api route shares the moderate rate-limit tier)
    from nomoji.api.analysis import router as analysis_router
    from nomoji.api.config import router as config_router
    from nomoji.api.rules import router as rules_router
    from nomoji.api.shared import router as shared_router
    from nomoji.api.system import router as system_router
    from nomoji.services.rate_limit import moderate_limit

    api_limits = [Depends(moderate_limit)]
    app.include_router(system_router, tags=["system"])
    app.include_router(
        config_router, prefix="/api/config", tags=["configuration"], dependencies=api_limits
    )
    app.include_router(rules_router, prefix="/api", tags=["rules"], dependencies=api_limits)
    app.include_router(analysis_router, prefix="/api", tags=["analysis"], dependencies=api_limits)
    app.include_router(
        shared_router, prefix="/api/shared", tags=["sharing"], dependencies=api_limits
    )

    # Internal job endpoints, token-authenticated
    from nomoji.api.internal import router as internal_router

    app.include_router(internal_router, tags=["internal"])

    return app


app = create_app()
