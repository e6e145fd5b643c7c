"""Respondent session flow.

The library API for embedding clients, and the engine behind the stateless
evaluate endpoint.
"""

from feedback_app.flow.session import (
    FlowState,
    FormSession,
    StepValidationError,
    SubmitResult,
    validate_answer,
)

__all__ = [
    "FlowState",
    "FormSession",
    "StepValidationError",
    "SubmitResult",
    "validate_answer",
]
