"""Pydantic schemas for the submission boundary."""

from typing import Any

from pydantic import BaseModel, Field

from feedback_app.rules.models import CustomerTier, QuestionMeta
from feedback_app.schemas.form import FlagSetRead


class QuestionMetaIn(BaseModel):
    """Question metadata sent with every submission."""

    id: str
    question_type: str
    category_tag: str | None = None

    def to_meta(self) -> QuestionMeta:
        return QuestionMeta(
            id=self.id,
            question_type=self.question_type,
            category_tag=self.category_tag,
        )


class ClientMetadata(BaseModel):
    """Browser-side hints about the respondent's client."""

    user_agent: str | None = None
    device_type: str | None = None
    browser: str | None = None
    os: str | None = None
    referral_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None


class SubmissionPayload(BaseModel):
    """Schema for submitting a completed feedback form."""

    form_id: str
    estate_id: str | None = None
    session_id: str
    answers: dict[str, str | list[str] | None] = Field(
        ..., description="Question id -> answer; null means unanswered"
    )
    question_meta: list[QuestionMetaIn] = Field(
        ..., description="Metadata for every question in the form"
    )
    metadata: ClientMetadata = Field(default_factory=ClientMetadata)
    # Hidden form field; humans never fill it in. Bots may put anything here
    honeypot: Any = None


class SubmissionResult(BaseModel):
    """Successful submission response.

    Honeypot hits get ``success`` only, so bots cannot tell they were caught.
    """

    success: bool = True
    response_id: str | None = None
    flags: FlagSetRead | None = None
    tier: CustomerTier | None = None
    is_duplicate: bool | None = None


class SubmissionFailure(BaseModel):
    """Failed submission response."""

    success: bool = False
    error: str
