"""Submitted feedback responses and their answer rows."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedback_app.db.base import Base, TimestampMixin, utc_now
from feedback_app.rules.models import CustomerTier


class Response(Base, TimestampMixin):
    """One respondent submission.

    Flags and tier are computed once at submission time and never
    recomputed. Only the admin review fields change afterwards.
    """

    __tablename__ = "responses"

    form_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("forms.id"),
        nullable=True,
        index=True,
    )
    estate_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("estates.id"),
        nullable=True,
    )
    session_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Client metadata
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    device_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    browser: Mapped[str | None] = mapped_column(String(50), nullable=True)
    os: Mapped[str | None] = mapped_column(String(50), nullable=True)
    referral_source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    utm_medium: Mapped[str | None] = mapped_column(String(255), nullable=True)
    utm_campaign: Mapped[str | None] = mapped_column(String(255), nullable=True)

    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    customer_tier: Mapped[CustomerTier] = mapped_column(
        String(20),
        default=CustomerTier.STANDARD,
        nullable=False,
    )
    # live_form or legacy import
    source: Mapped[str] = mapped_column(String(50), default="live_form", nullable=False)
    is_duplicate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Triage flags
    priority_flag: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    churn_risk_flag: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    high_referrer_flag: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    upsell_candidate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    submission_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    # Admin review
    reviewed_by_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    legacy_import: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    answers: Mapped[list["ResponseAnswer"]] = relationship(
        "ResponseAnswer",
        back_populates="response",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_responses_submission_timestamp", "submission_timestamp"),
    )

    def __repr__(self) -> str:
        return f"<Response {self.id[:8]}... tier={self.customer_tier}>"


class ResponseAnswer(Base):
    """Answer to one question within a response.

    Multi-select answers are stored as a JSON array string.
    """

    __tablename__ = "answers"

    response_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("questions.id"),
        nullable=False,
    )
    answer_value: Mapped[str] = mapped_column(Text, nullable=False)

    response: Mapped["Response"] = relationship("Response", back_populates="answers")

    __table_args__ = (
        Index("ix_answers_question_value", "question_id", "answer_value"),
    )
