"""Authoritative submission processing.

The submission guard decides whether a payload is persisted at all
(honeypot) and whether it is annotated as a duplicate. The service then
recomputes flags and tier with the same engine the live flow uses and
writes the response and its answers.

The duplicate check and the insert are not atomic with each other: two
near-simultaneous submissions from one phone number can both pass the
check. That only costs a missed duplicate annotation.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_app.core.logging import hook_logger
from feedback_app.db.base import utc_now
from feedback_app.models.response import Response, ResponseAnswer
from feedback_app.rules.assessment import Assessment, EngineConfig, assess
from feedback_app.rules.models import Answers, CustomerTier, FlagSet, Multi, Scalar, find_question, parse_answers
from feedback_app.schemas.submission import SubmissionPayload
from feedback_app.services.forms import FormService
from feedback_app.services.metadata import normalize_phone, parse_user_agent

logger = logging.getLogger(__name__)

IDENTITY_TAG = "identity"
PHONE_TYPE = "phone"


class SubmissionError(Exception):
    """Persisting a submission failed; nothing was written."""


@dataclass(frozen=True)
class Admission:
    """Guard decision for one payload."""

    accept: bool  # persist the submission
    duplicate: bool
    phone_question_id: str | None = None
    phone_number: str | None = None

    @property
    def spam(self) -> bool:
        return not self.accept


@dataclass(frozen=True)
class SubmissionOutcome:
    """What the caller is told about a processed submission."""

    response_id: str | None
    assessment: Assessment | None
    is_duplicate: bool = False

    @property
    def persisted(self) -> bool:
        return self.response_id is not None

    @property
    def flags(self) -> FlagSet | None:
        return self.assessment.flags if self.assessment else None

    @property
    def tier(self) -> CustomerTier | None:
        return self.assessment.tier if self.assessment else None


class SubmissionGuard:
    """Honeypot and repeat-phone-number checks. Server side only."""

    def __init__(
        self,
        session: AsyncSession,
        duplicate_window: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.session = session
        self.duplicate_window = duplicate_window
        self.clock = clock

    @staticmethod
    def is_spam(honeypot: Any) -> bool:
        """Any value in the hidden honeypot field marks the request as a bot."""
        return bool(honeypot)

    async def is_duplicate(self, question_id: str, value: str) -> bool:
        """Check for the same answer to the same question within the window."""
        since = self.clock() - self.duplicate_window
        result = await self.session.execute(
            select(ResponseAnswer.response_id)
            .join(Response, ResponseAnswer.response_id == Response.id)
            .where(ResponseAnswer.question_id == question_id)
            .where(ResponseAnswer.answer_value == value)
            .where(Response.submission_timestamp >= since)
            .limit(1)
        )
        return result.first() is not None

    async def admit(self, payload: SubmissionPayload) -> Admission:
        """Decide whether to persist the payload and whether it is a duplicate."""
        if self.is_spam(payload.honeypot):
            return Admission(accept=False, duplicate=False)

        questions = [q.to_meta() for q in payload.question_meta]
        phone_question = find_question(questions, IDENTITY_TAG, PHONE_TYPE)
        if phone_question is None:
            return Admission(accept=True, duplicate=False)

        phone = payload.answers.get(phone_question.id)
        if not isinstance(phone, str) or not phone:
            return Admission(accept=True, duplicate=False, phone_question_id=phone_question.id)

        duplicate = await self.is_duplicate(phone_question.id, phone)
        return Admission(
            accept=True,
            duplicate=duplicate,
            phone_question_id=phone_question.id,
            phone_number=phone,
        )


def build_answer_rows(payload: SubmissionPayload, answers: Answers) -> list[tuple[str, str]]:
    """(question_id, stored value) for every answered question in the payload.

    Empty answers are not stored; multi-select answers become JSON arrays.
    """
    rows: list[tuple[str, str]] = []
    for meta in payload.question_meta:
        answer = answers.get(meta.id)
        if isinstance(answer, Multi):
            rows.append((meta.id, json.dumps(list(answer.items))))
        elif isinstance(answer, Scalar) and answer.value != "":
            rows.append((meta.id, answer.value))
    return rows


class SubmissionService:
    """Processes submissions at the authoritative boundary."""

    def __init__(
        self,
        session: AsyncSession,
        config: EngineConfig,
        duplicate_window: timedelta = timedelta(hours=24),
        source: str = "live_form",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.session = session
        self.config = config
        self.source = source
        self.clock = clock
        self.guard = SubmissionGuard(session, duplicate_window, clock)
        self.forms = FormService(session)

    async def process(
        self,
        payload: SubmissionPayload,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SubmissionOutcome:
        """Guard, assess and persist one submission.

        Args:
            payload: Submitted form data
            ip_address: Client IP as seen by the server
            user_agent: User-Agent header, used when the payload has none

        Returns:
            SubmissionOutcome; ``response_id`` is None for honeypot hits

        Raises:
            SubmissionError: If the response could not be stored
        """
        admission = await self.guard.admit(payload)
        if admission.spam:
            logger.warning(
                "Honeypot triggered, discarding submission",
                extra={"form_id": payload.form_id, "action": "honeypot"},
            )
            return SubmissionOutcome(response_id=None, assessment=None)

        if admission.duplicate:
            logger.info(
                "Repeat phone number within duplicate window",
                extra={"form_id": payload.form_id, "action": "duplicate"},
            )

        answers = parse_answers(payload.answers)
        rules = await self.forms.get_rules(payload.form_id)
        questions = [q.to_meta() for q in payload.question_meta]
        assessment = assess(rules, answers, questions, self.config)

        response_id = await self._persist(payload, answers, assessment, admission, ip_address, user_agent)

        logger.info(
            f"Submission stored: tier={assessment.tier.value} "
            f"flags={assessment.flags.to_dict()} duplicate={admission.duplicate}",
            extra={"form_id": payload.form_id, "response_id": response_id},
        )
        self._run_hooks(response_id, assessment.flags)

        return SubmissionOutcome(
            response_id=response_id,
            assessment=assessment,
            is_duplicate=admission.duplicate,
        )

    async def _persist(
        self,
        payload: SubmissionPayload,
        answers: Answers,
        assessment: Assessment,
        admission: Admission,
        ip_address: str | None,
        user_agent: str | None,
    ) -> str:
        """Write the response row and its answer rows in one transaction."""
        ua = payload.metadata.user_agent or user_agent or ""
        device = parse_user_agent(ua)
        flags = assessment.flags

        response = Response(
            form_id=payload.form_id,
            estate_id=payload.estate_id,
            session_id=payload.session_id,
            ip_address=ip_address,
            user_agent=ua,
            device_type=device.device_type,
            browser=device.browser,
            os=device.os,
            phone_number=normalize_phone(admission.phone_number) if admission.phone_number else None,
            customer_tier=assessment.tier,
            source=self.source,
            is_duplicate=admission.duplicate,
            referral_source=payload.metadata.referral_source or None,
            utm_medium=payload.metadata.utm_medium or None,
            utm_campaign=payload.metadata.utm_campaign or None,
            priority_flag=flags.priority,
            churn_risk_flag=flags.churn_risk,
            high_referrer_flag=flags.high_referrer,
            upsell_candidate=flags.upsell_candidate,
            submission_timestamp=self.clock(),
        )

        try:
            self.session.add(response)
            await self.session.flush()

            for question_id, value in build_answer_rows(payload, answers):
                self.session.add(
                    ResponseAnswer(
                        response_id=response.id,
                        question_id=question_id,
                        answer_value=value,
                    )
                )

            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to store submission", extra={"form_id": payload.form_id})
            raise SubmissionError("Failed to save response") from e

        return response.id

    def _run_hooks(self, response_id: str, flags: FlagSet) -> None:
        if flags.priority:
            hook_logger.priority_escalation(response_id)
        if flags.upsell_candidate:
            hook_logger.upsell_candidate(response_id)
