"""Appeal Assignment Engine — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from appeal_engine.adapters.persistence.database import engine
from appeal_engine.domain.errors import InvalidCategoryError, TransientStoreError
from appeal_engine.infrastructure.api.routes_admins import router as admins_router
from appeal_engine.infrastructure.api.routes_appeals import router as appeals_router
from appeal_engine.infrastructure.api.routes_health import router as health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Appeal Assignment Engine",
        description="Workload-aware assignment of student appeals to administrators",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(TransientStoreError)
    async def store_unavailable(request: Request, exc: TransientStoreError):
        logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Workload store unavailable"})

    @app.exception_handler(InvalidCategoryError)
    async def invalid_category(request: Request, exc: InvalidCategoryError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(appeals_router, prefix="/api")
    app.include_router(admins_router, prefix="/api")

    return app


app = create_app()
