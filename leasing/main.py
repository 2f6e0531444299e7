"""Leasing FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from leasing.api.routes import calendar, contracts, owners, portal_payments, receipts
from leasing.config import settings
from leasing.errors import AppError, error_response
from leasing.models import Base
from leasing.services import async_engine
from leasing.services.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    setup_logging()
    # Startup: Initialize database tables
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialized")
    yield
    # Shutdown: Cleanup if needed
    await async_engine.dispose()
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.api_title,
    description="Rental contract provisioning, payment verification and calendar API",
    version=settings.api_version,
    lifespan=lifespan,
)


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Render application errors as {"error": {"code", "message"}}."""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.code}")
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


# Include routers
app.include_router(owners.router)
app.include_router(contracts.router)
app.include_router(portal_payments.router)
app.include_router(receipts.router)
app.include_router(calendar.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
