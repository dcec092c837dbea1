# FastAPI application factory with lifespan management.
# Entrypoint: uvicorn memcached_admin.main:create_app --factory --host 0.0.0.0 --port 8080

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from memcached_admin.client import PymemcacheClient
from memcached_admin.config import get_settings
from memcached_admin.exceptions import register_exception_handlers
from memcached_admin.logging_config import configure_logging
from memcached_admin.middleware import RequestContextMiddleware
from memcached_admin.routes import health
from memcached_admin.routes import memcached as memcached_routes
from memcached_admin.services.admin import create_admin_service

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the memcached client + admin service; close sockets on shutdown."""
    settings = get_settings()
    service = create_admin_service(settings)

    app.state.settings = settings
    app.state.admin_service = service

    yield

    if isinstance(service.client, PymemcacheClient):
        service.client.close()
        logger.info("memcached_client_closed")


def create_app() -> FastAPI:
    """Application factory. Invoked by: uvicorn memcached_admin.main:create_app --factory"""
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="Memcached Admin",
        description="Flush and statistics endpoints for a memcached cluster",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(memcached_routes.router, tags=["memcached"])

    return app


def run() -> None:
    """Console entrypoint: serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(), host="0.0.0.0", port=settings.port, log_config=None)
