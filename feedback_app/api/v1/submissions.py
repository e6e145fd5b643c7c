"""Authoritative submission endpoint."""

import logging
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Body, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from feedback_app.api.deps import DbSession, Engine, get_client_ip
from feedback_app.core.config import settings
from feedback_app.schemas.form import FlagSetRead
from feedback_app.schemas.submission import SubmissionFailure, SubmissionPayload, SubmissionResult
from feedback_app.services.submission import SubmissionError, SubmissionGuard, SubmissionService

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_payload(raw: dict[str, Any]) -> SubmissionPayload:
    """Validate a raw body, reporting errors the way FastAPI does for bodies."""
    try:
        return SubmissionPayload.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in e.errors(include_url=False)]
        )


@router.post(
    "",
    response_model=SubmissionResult,
    response_model_exclude_none=True,
    responses={500: {"model": SubmissionFailure}},
)
async def submit_feedback(
    session: DbSession,
    engine: Engine,
    request: Request,
    raw: dict[str, Any] = Body(..., description="SubmissionPayload"),
) -> SubmissionResult | JSONResponse:
    """Submit a completed feedback form.

    Flags and tier are recomputed here from the submitted answers; any
    values the client computed for display are not trusted. Honeypot hits
    get a plain success before the body is validated, so bots cannot tell
    they were caught.
    """
    if SubmissionGuard.is_spam(raw.get("honeypot")):
        logger.warning("Honeypot triggered, discarding submission", extra={"action": "honeypot"})
        return SubmissionResult(success=True)

    body = parse_payload(raw)
    service = SubmissionService(
        session,
        config=engine,
        duplicate_window=timedelta(hours=settings.duplicate_window_hours),
        source=settings.submission_source,
    )

    try:
        outcome = await service.process(
            body,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
    except SubmissionError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=SubmissionFailure(error=str(e)).model_dump(),
        )

    if not outcome.persisted:
        return SubmissionResult(success=True)

    return SubmissionResult(
        success=True,
        response_id=outcome.response_id,
        flags=FlagSetRead(**outcome.flags.to_dict()),
        tier=outcome.tier,
        is_duplicate=outcome.is_duplicate,
    )
