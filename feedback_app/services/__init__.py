"""Business logic services."""

from feedback_app.services.forms import FormNotFoundError, FormService
from feedback_app.services.submission import (
    SubmissionError,
    SubmissionGuard,
    SubmissionService,
)

__all__ = [
    "FormService",
    "FormNotFoundError",
    "SubmissionGuard",
    "SubmissionService",
    "SubmissionError",
]
