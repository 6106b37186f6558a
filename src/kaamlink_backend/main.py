"""FastAPI application for the KaamLink shift workflow."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from kaamlink_backend.core.config import settings
from kaamlink_backend.core.database import db_manager, init_db, close_db
from kaamlink_backend.core.error_handling import (
    AuthenticationError,
    ErrorContext,
    KaamLinkError,
    error_handler,
)
from kaamlink_backend.core.logging import configure_logging
from kaamlink_backend.api.applications import router as applications_router
from kaamlink_backend.api.jobs import router as jobs_router
from kaamlink_backend.api.payments import router as payments_router
from kaamlink_backend.api.ratings import router as ratings_router
from kaamlink_backend.api.shifts import router as shifts_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("KaamLink backend starting", environment=settings.environment)
    init_db()
    yield
    close_db()
    logger.info("KaamLink backend stopped")


app = FastAPI(
    title="KaamLink Backend API",
    description="Shift verification and job workflow for the KaamLink labour marketplace",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(jobs_router)
app.include_router(applications_router)
app.include_router(shifts_router)
app.include_router(ratings_router)
app.include_router(payments_router)


@app.exception_handler(KaamLinkError)
async def kaamlink_error_handler(request: Request, exc: KaamLinkError):
    """Answer workflow errors as ``{"error": code, "detail": message}``."""
    error_handler.handle_error(
        exc,
        ErrorContext(operation=f"{request.method} {request.url.path}", component="api")
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.code, "detail": exc.message},
        headers=headers
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    if db_manager.engine is None:
        db_manager.initialize()
    database_ok = db_manager.health_check()
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": "kaamlink-backend",
        "database": "ok" if database_ok else "unavailable"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "kaamlink_backend.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
