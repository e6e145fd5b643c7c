"""Database models for the feedback form service."""

from feedback_app.models.form import Estate, Form, LogicRule, Question, QuestionOption
from feedback_app.models.response import Response, ResponseAnswer

__all__ = [
    # Configuration
    "Estate",
    "Form",
    "Question",
    "QuestionOption",
    "LogicRule",
    # Submissions
    "Response",
    "ResponseAnswer",
]
