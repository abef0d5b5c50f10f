import logging
import os
import subprocess
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.drains import router as drains_router
from .api.health import router as health_router
from .api.prometheus import router as prometheus_router
from .config import API_PREFIX, API_VERSION, DrainSettings, load_settings
from .db import engine as default_engine, init_db
from .logging_config import setup_logging
from .middleware import TracingMiddleware
from .store import EventStore

logger = logging.getLogger("drains")


def _auto_migrate() -> None:
    if os.getenv("AUTO_MIGRATE", "0") not in ("1", "true", "True"):
        return
    try:
        subprocess.run(["alembic", "upgrade", "head"], check=True)
        logger.info("Alembic auto-migrate: upgrade head OK", extra={"component": "db"})
    except (OSError, subprocess.CalledProcessError):
        logger.exception("Alembic auto-migrate failed", extra={"component": "db"})
        raise


def create_app(settings: Optional[DrainSettings] = None, store: Optional[EventStore] = None) -> FastAPI:
    """Build the application; settings and store are fixed for its lifetime"""
    settings = settings if settings is not None else load_settings()
    store = store if store is not None else EventStore(default_engine)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        _auto_migrate()
        init_db(store.engine)
        logger.info("Drains API ready", extra={
            "component": "api",
            "ingest_enabled": settings.enabled,
            "metrics_configured": bool(settings.metrics.secret),
            "traces_configured": bool(settings.traces.secret),
            "max_bytes": settings.max_bytes,
            "batch_size": settings.batch_size,
        })
        yield
        logger.info("Drains API shutting down", extra={"component": "api"})

    application = FastAPI(
        title="Drains API",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    application.state.settings = settings
    application.state.store = store

    @application.exception_handler(StarletteHTTPException)
    async def empty_not_found(request: Request, exc: StarletteHTTPException):
        # Unknown routes and methods look the same as disabled drains: bare 404
        if exc.status_code in (404, 405):
            return Response(status_code=404)
        return await http_exception_handler(request, exc)

    application.add_middleware(TracingMiddleware)

    application.include_router(drains_router)
    application.include_router(health_router, prefix=API_PREFIX)
    application.include_router(prometheus_router, prefix=API_PREFIX)
    return application


def get_app() -> FastAPI:
    """ASGI factory: ``uvicorn drains_api.main:get_app --factory``"""
    setup_logging()
    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(get_app(), host="0.0.0.0", port=int(os.getenv("APP_PORT", "8080")))
