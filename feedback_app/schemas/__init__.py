"""Pydantic schemas for request/response validation."""

from feedback_app.schemas.form import (
    EvaluateRequest,
    EvaluateResponse,
    FlagSetRead,
    FormRead,
    LogicRuleRead,
    QuestionOptionRead,
    QuestionRead,
)
from feedback_app.schemas.submission import (
    ClientMetadata,
    QuestionMetaIn,
    SubmissionFailure,
    SubmissionPayload,
    SubmissionResult,
)

__all__ = [
    # Form configuration
    "FormRead",
    "QuestionRead",
    "QuestionOptionRead",
    "LogicRuleRead",
    # Live evaluation
    "EvaluateRequest",
    "EvaluateResponse",
    "FlagSetRead",
    # Submission
    "SubmissionPayload",
    "SubmissionResult",
    "SubmissionFailure",
    "ClientMetadata",
    "QuestionMetaIn",
]
