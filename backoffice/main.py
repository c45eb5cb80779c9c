"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from sqlalchemy import text

from backoffice.core.config import get_settings
from backoffice.core.database import SessionLocal, close_engine
from backoffice.core.metrics import build_metrics_response, instrument_http_request
from backoffice.modules.analytics.router import router as analytics_router
from backoffice.modules.audit.router import router as audit_router
from backoffice.modules.catalog.router import router as catalog_router
from backoffice.modules.entities.router import router as entities_router
from backoffice.modules.identity.router import router as identity_router
from backoffice.modules.identity.service import build_identity_service
from backoffice.modules.transitions.router import router as transitions_router
from backoffice.modules.users.router import router as users_router
from backoffice.shared.exceptions import UnavailableException, register_exception_handlers
from backoffice.shared.utils import utc_now

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application startup and shutdown hooks."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("Starting %s", settings.app_name)

    if settings.bootstrap_admin_email and settings.bootstrap_admin_password:
        async with SessionLocal() as session:
            try:
                service = build_identity_service(session)
                created = await service.ensure_bootstrap_admin(
                    settings.bootstrap_admin_email,
                    settings.bootstrap_admin_password,
                    settings.bootstrap_admin_name,
                )
                await session.commit()
                if created is not None:
                    logger.info("Bootstrap super admin created: %s", created.email)
            except Exception:
                await session.rollback()
                logger.exception("Failed during startup initialization")
                raise

    yield

    logger.info("Shutting down %s", settings.app_name)
    await close_engine()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
app.middleware("http")(instrument_http_request)

register_exception_handlers(app)

app.include_router(identity_router, prefix=settings.api_prefix)
app.include_router(transitions_router, prefix=settings.api_prefix)
app.include_router(entities_router, prefix=settings.api_prefix)
app.include_router(analytics_router, prefix=settings.api_prefix)
app.include_router(audit_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(catalog_router, prefix=settings.api_prefix)


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    """Liveness probe endpoint."""
    return {"status": "ok"}


async def _is_database_ready() -> bool:
    """Return True if DB accepts basic queries."""
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database readiness check failed")
        return False


@app.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness probe endpoint with DB dependency check."""
    if not await _is_database_ready():
        raise UnavailableException("Database is not ready")
    return {
        "status": "ready",
        "database": "ok",
        "timestamp": utc_now().isoformat(),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(_: Request) -> Response:
    """Prometheus metrics endpoint."""
    return build_metrics_response()
