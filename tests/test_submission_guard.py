"""Tests for honeypot and duplicate phone number checks."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_app.models.response import Response, ResponseAnswer
from feedback_app.schemas.submission import SubmissionPayload
from feedback_app.services.submission import SubmissionGuard

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
PHONE = "08031234567"


def fixed_clock() -> datetime:
    return NOW


async def store_prior_submission(
    session: AsyncSession,
    form_id: str,
    question_id: str,
    phone: str,
    submitted_at: datetime,
) -> None:
    response = Response(form_id=form_id, session_id="prior", submission_timestamp=submitted_at)
    session.add(response)
    await session.flush()
    session.add(ResponseAnswer(response_id=response.id, question_id=question_id, answer_value=phone))
    await session.commit()


def make_payload(form_id, question_meta_payload, answers, honeypot=None) -> SubmissionPayload:
    return SubmissionPayload(
        form_id=form_id,
        session_id="session-1",
        answers=answers,
        question_meta=question_meta_payload,
        honeypot=honeypot,
    )


class TestHoneypot:
    """Spam short-circuit."""

    @pytest.mark.parametrize("honeypot", ["x", "http://spam.example", " ", 1, ["a"], {"url": "x"}])
    def test_non_empty_honeypot_is_spam(self, honeypot) -> None:
        assert SubmissionGuard.is_spam(honeypot) is True

    @pytest.mark.parametrize("honeypot", [None, "", 0, []])
    def test_empty_honeypot_is_not_spam(self, honeypot) -> None:
        assert SubmissionGuard.is_spam(honeypot) is False

    async def test_spam_is_not_admitted(self, async_session, seeded_form, question_meta_payload) -> None:
        """Test the guard rejects a honeypot hit before any lookup."""
        guard = SubmissionGuard(async_session, clock=fixed_clock)
        payload = make_payload(seeded_form.id, question_meta_payload, {}, honeypot="bot")

        admission = await guard.admit(payload)

        assert admission.spam is True
        assert admission.duplicate is False


class TestDuplicateWindow:
    """Repeat phone numbers within 24 hours."""

    @pytest.mark.parametrize(
        ("age", "expected"),
        [
            (timedelta(hours=23), True),
            (timedelta(hours=25), False),
            (timedelta(minutes=5), True),
        ],
    )
    async def test_prior_submission_age(
        self,
        async_session: AsyncSession,
        seeded_form,
        question_ids,
        question_meta_payload,
        age: timedelta,
        expected: bool,
    ) -> None:
        """Test only prior submissions inside the window mark a duplicate."""
        phone_qid = question_ids["whatsapp"]
        await store_prior_submission(async_session, seeded_form.id, phone_qid, PHONE, NOW - age)
        guard = SubmissionGuard(async_session, clock=fixed_clock)

        admission = await guard.admit(
            make_payload(seeded_form.id, question_meta_payload, {phone_qid: PHONE})
        )

        assert admission.accept is True
        assert admission.duplicate is expected
        assert admission.phone_question_id == phone_qid
        assert admission.phone_number == PHONE

    async def test_different_number_not_duplicate(
        self, async_session, seeded_form, question_ids, question_meta_payload
    ) -> None:
        """Test a different phone number is not a duplicate."""
        phone_qid = question_ids["whatsapp"]
        await store_prior_submission(async_session, seeded_form.id, phone_qid, PHONE, NOW - timedelta(hours=1))
        guard = SubmissionGuard(async_session, clock=fixed_clock)

        assert await guard.is_duplicate(phone_qid, "08039999999") is False

    async def test_same_value_other_question_not_duplicate(
        self, async_session, seeded_form, question_ids
    ) -> None:
        """Test the match is scoped to the phone question."""
        await store_prior_submission(
            async_session, seeded_form.id, question_ids["comments"], PHONE, NOW - timedelta(hours=1)
        )
        guard = SubmissionGuard(async_session, clock=fixed_clock)

        assert await guard.is_duplicate(question_ids["whatsapp"], PHONE) is False

    async def test_configurable_window(
        self, async_session, seeded_form, question_ids
    ) -> None:
        """Test the window length is configurable."""
        phone_qid = question_ids["whatsapp"]
        await store_prior_submission(async_session, seeded_form.id, phone_qid, PHONE, NOW - timedelta(hours=23))
        guard = SubmissionGuard(async_session, duplicate_window=timedelta(hours=12), clock=fixed_clock)

        assert await guard.is_duplicate(phone_qid, PHONE) is False

    async def test_no_phone_answer(self, async_session, seeded_form, question_ids, question_meta_payload) -> None:
        """Test a submission without a phone answer is admitted as new."""
        guard = SubmissionGuard(async_session, clock=fixed_clock)

        admission = await guard.admit(
            make_payload(seeded_form.id, question_meta_payload, {question_ids["entry"]: "PATH_A"})
        )

        assert admission.accept is True
        assert admission.duplicate is False
        assert admission.phone_number is None

    async def test_no_phone_question(self, async_session) -> None:
        """Test forms without an identity phone question skip the lookup."""
        guard = SubmissionGuard(async_session, clock=fixed_clock)
        payload = SubmissionPayload(
            form_id="f",
            session_id="s",
            answers={"q1": PHONE},
            question_meta=[{"id": "q1", "question_type": "text", "category_tag": "identity"}],
        )

        admission = await guard.admit(payload)

        assert admission.accept is True
        assert admission.phone_question_id is None

    async def test_guard_writes_nothing(self, async_session, seeded_form, question_ids, question_meta_payload) -> None:
        """Test admission checks never insert rows."""
        guard = SubmissionGuard(async_session, clock=fixed_clock)
        await guard.admit(
            make_payload(seeded_form.id, question_meta_payload, {question_ids["whatsapp"]: PHONE})
        )

        count = await async_session.scalar(select(func.count()).select_from(Response))
        assert count == 0
