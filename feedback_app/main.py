"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from feedback_app.api.v1.router import api_router
from feedback_app.core.config import settings
from feedback_app.core.logging import setup_logging
from feedback_app.db.init_db import init_db
from feedback_app.db.session import AsyncSessionLocal

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(f"Starting ISP Feedback API (env={settings.env})")

    if settings.init_db_on_startup:
        logger.info("Initializing database...")
        async with AsyncSessionLocal() as session:
            await init_db(session)

    yield

    logger.info("Shutting down ISP Feedback API")


app = FastAPI(
    title="ISP Feedback API",
    description="Customer feedback form with conditional logic and submission triage",
    version="0.1.0",
    docs_url="/docs" if settings.is_dev else None,
    redoc_url="/redoc" if settings.is_dev else None,
    openapi_url="/openapi.json" if settings.is_dev else None,
    lifespan=lifespan,
)

# The form is embedded on estate pages, so any origin may call it
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions.

    This handler runs outside the CORS middleware, so the header is set here.
    """
    logger.exception(f"Unhandled exception: {exc}")

    # Driver and SQL text only ever reaches local development clients
    error = str(exc) if settings.is_dev else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": error},
        headers={"Access-Control-Allow-Origin": "*"},
    )


app.include_router(api_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict:
    """Root endpoint with service info."""
    return {
        "service": "ISP Feedback API",
        "version": "0.1.0",
        "docs": "/docs" if settings.is_dev else "Disabled in production",
    }
