"""Respondent session flow as an explicit state machine.

One respondent, one device: every answer synchronously recomputes the
visible question sequence before any navigation is allowed. Navigation
requested while a step transition or a submission is in flight is ignored,
not queued.

States::

    DISPLAYING --advance/back/auto-advance--> TRANSITIONING
    TRANSITIONING --finish_transition--> DISPLAYING
    DISPLAYING --submit--> SUBMITTING --ok--> SUBMITTED
                                      --failed--> ERRORED --dismiss_error--> DISPLAYING
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from feedback_app.rules.assessment import Assessment, EngineConfig, assess
from feedback_app.rules.models import Answer, Multi, QuestionMeta, Rule, Scalar, find_question, to_answer
from feedback_app.rules.visibility import visible_questions
from feedback_app.services.metadata import validate_nigerian_phone

logger = logging.getLogger(__name__)

# Question types that advance on their own once answered
AUTO_ADVANCE_TYPES = frozenset({"single_choice", "dropdown"})

REQUIRED_MESSAGE = "Please answer this question before continuing"
PHONE_MESSAGE = "Please enter a valid Nigerian phone number"
SUBMIT_FAILED_MESSAGE = "Submission failed. Please try again."
UNEXPECTED_ERROR_MESSAGE = "Unexpected error submitting form"

PATH_MESSAGES = {
    "PATH_A": "Got it. We'll use your feedback to investigate and improve speeds in your area.",
    "PATH_B": "Thanks! Your plan preferences have been noted.",
    "PATH_C": "Signal issue noted. Our technical team will investigate your area.",
    "PATH_D": "Your urgent issue has been escalated to our team. We'll contact you within the hour.",
    "PATH_E": "Awesome! Your referral has been logged.",
    "PATH_F": "Your profile is all set up. We'll be in touch with the best plan for your needs.",
}
DEFAULT_MESSAGE = "Your feedback helps us improve your connection. Thank you!"


class FlowState(str, Enum):
    """Where the respondent session currently is."""

    DISPLAYING = "displaying"
    TRANSITIONING = "transitioning"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    ERRORED = "errored"


class StepValidationError(ValueError):
    """A visible question is unanswered or malformed."""

    def __init__(self, question_id: str, message: str) -> None:
        super().__init__(message)
        self.question_id = question_id
        self.message = message


@dataclass(frozen=True)
class SubmitResult:
    """Outcome reported by a submitter."""

    success: bool
    error: str | None = None


Submitter = Callable[[dict[str, Answer]], Awaitable[SubmitResult]]


def _is_empty(answer: Answer | None) -> bool:
    if answer is None:
        return True
    if isinstance(answer, Multi):
        return len(answer.items) == 0
    return answer.value == ""


def validate_answer(question: QuestionMeta, answer: Answer | None) -> str | None:
    """Return the inline error message for a question, or None if it passes."""
    if question.required and _is_empty(answer):
        return REQUIRED_MESSAGE
    if question.question_type == "phone" and isinstance(answer, Scalar) and answer.value:
        if not validate_nigerian_phone(answer.value):
            return PHONE_MESSAGE
    return None


class FormSession:
    """Live, progressive evaluation of one respondent's answers.

    Uses the same engine functions as the submission processor, so the
    snapshot shown to the respondent matches what gets stored.
    """

    def __init__(
        self,
        questions: Sequence[QuestionMeta],
        rules: Sequence[Rule],
        config: EngineConfig,
    ) -> None:
        self.questions = list(questions)
        self.rules = list(rules)
        self.config = config
        self.reset()

    @classmethod
    def restore(
        cls,
        questions: Sequence[QuestionMeta],
        rules: Sequence[Rule],
        config: EngineConfig,
        raw_answers: dict[str, Any],
    ) -> "FormSession":
        """Rebuild a session from a captured answer set without navigating.

        Used by stateless callers that hold the answers and need the visible
        sequence, snapshot and success message for them.
        """
        session = cls(questions, rules, config)
        for question_id, value in raw_answers.items():
            answer = to_answer(value)
            if answer is not None:
                session.answers[question_id] = answer
        session._visible = visible_questions(session.questions, session.rules, session.answers)

        entry = find_question(session.questions, config.entry_category_tag)
        if entry is not None and isinstance(session.answers.get(entry.id), Scalar):
            session.path_taken = session.answers[entry.id].value
        return session

    def reset(self) -> None:
        """Start over with an empty answer set."""
        self.state = FlowState.DISPLAYING
        self.answers: dict[str, Answer] = {}
        self.step = 0
        self.error: str | None = None
        self.path_taken: str | None = None
        self._target_step = 0
        self._visible = visible_questions(self.questions, self.rules, self.answers)

    # -- visible sequence ---------------------------------------------------

    @property
    def visible(self) -> list[QuestionMeta]:
        """Visible question sequence for the current answers."""
        return list(self._visible)

    @property
    def current_question(self) -> QuestionMeta | None:
        if 0 <= self.step < len(self._visible):
            return self._visible[self.step]
        return None

    @property
    def is_last_step(self) -> bool:
        return self.step >= len(self._visible) - 1

    def progress(self) -> tuple[int, int]:
        """(current step number, total visible steps), 1-based."""
        total = len(self._visible)
        return (min(self.step + 1, total), total)

    @property
    def progress_percent(self) -> int:
        current, total = self.progress()
        if total == 0:
            return 0
        return round(current / total * 100)

    def _clamp(self, step: int) -> int:
        return max(0, min(step, len(self._visible) - 1))

    # -- events -------------------------------------------------------------

    def answer(self, question_id: str, value: Any) -> bool:
        """Record an answer and recompute visibility.

        The update is applied before visibility is resolved, so auto-advance
        decisions see the sequence as it is after this answer.

        Returns:
            True if the answer started an auto-advance transition
        """
        if self.state != FlowState.DISPLAYING:
            return False

        answer = to_answer(value)
        updated = dict(self.answers)
        if answer is None:
            updated.pop(question_id, None)
        else:
            updated[question_id] = answer

        self.answers = updated
        self._visible = visible_questions(self.questions, self.rules, self.answers)
        self.step = self._clamp(self.step)

        entry = find_question(self.questions, self.config.entry_category_tag)
        if entry is not None and entry.id == question_id and isinstance(answer, Scalar):
            self.path_taken = answer.value

        current = self.current_question
        if (
            current is not None
            and current.id == question_id
            and current.question_type in AUTO_ADVANCE_TYPES
            and not _is_empty(answer)
            and not self.is_last_step
        ):
            self._begin_transition(self.step + 1)
            return True

        return False

    def advance(self) -> bool:
        """Move to the next visible question after validating the current one.

        Raises:
            StepValidationError: If the current question fails validation
        """
        if self.state != FlowState.DISPLAYING:
            return False

        current = self.current_question
        if current is not None:
            message = validate_answer(current, self.answers.get(current.id))
            if message:
                raise StepValidationError(current.id, message)

        if self.is_last_step:
            return False

        self._begin_transition(self.step + 1)
        return True

    def back(self) -> bool:
        """Move to the previous visible question."""
        if self.state != FlowState.DISPLAYING or self.step == 0:
            return False
        self._begin_transition(self.step - 1)
        return True

    def finish_transition(self) -> bool:
        """Complete a pending transition.

        The target is clamped to the visible sequence as it is now.
        """
        if self.state != FlowState.TRANSITIONING:
            return False
        self.step = self._clamp(self._target_step)
        self.state = FlowState.DISPLAYING
        return True

    def _begin_transition(self, target: int) -> None:
        self._target_step = target
        self.state = FlowState.TRANSITIONING

    async def submit(self, submitter: Submitter) -> bool:
        """Submit the answers from the last visible step.

        Only visible questions are validated; a question filtered out by a
        later answer never blocks submission. On failure the answers are
        kept so the respondent can retry.

        Raises:
            StepValidationError: If a visible question fails validation
        """
        if self.state != FlowState.DISPLAYING or not self.is_last_step:
            return False

        for question in self._visible:
            message = validate_answer(question, self.answers.get(question.id))
            if message:
                raise StepValidationError(question.id, message)

        self.state = FlowState.SUBMITTING
        self.error = None

        try:
            result = await submitter(dict(self.answers))
        except Exception:
            logger.exception("Submitter raised")
            result = SubmitResult(success=False, error=UNEXPECTED_ERROR_MESSAGE)

        if result.success:
            self.state = FlowState.SUBMITTED
        else:
            self.state = FlowState.ERRORED
            self.error = result.error or SUBMIT_FAILED_MESSAGE

        return result.success

    def dismiss_error(self) -> bool:
        """Return from a failed submission to the last step for a retry."""
        if self.state != FlowState.ERRORED:
            return False
        self.state = FlowState.DISPLAYING
        self.step = self._clamp(self.step)
        return True

    # -- derived output -----------------------------------------------------

    def snapshot(self) -> Assessment:
        """Live flags and tier for the current answers."""
        return assess(self.rules, self.answers, self.questions, self.config)

    @property
    def success_message(self) -> str:
        return PATH_MESSAGES.get(self.path_taken or "", DEFAULT_MESSAGE)
