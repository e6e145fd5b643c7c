"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from feedback_app.api.v1 import forms, health, submissions

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Form configuration and live evaluation
api_router.include_router(
    forms.router,
    prefix="/forms",
    tags=["forms"],
)

# Authoritative submission
api_router.include_router(
    submissions.router,
    prefix="/submissions",
    tags=["submissions"],
)
