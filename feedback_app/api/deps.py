"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_app.core.config import settings
from feedback_app.db.session import get_db
from feedback_app.rules.assessment import EngineConfig


def get_engine_config() -> EngineConfig:
    """Engine configuration shared by evaluation and submission endpoints."""
    return EngineConfig.from_settings(settings)


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from request.

    Args:
        request: FastAPI request

    Returns:
        Client IP address or None
    """
    # Check for forwarded header (when behind proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return None


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
Engine = Annotated[EngineConfig, Depends(get_engine_config)]
