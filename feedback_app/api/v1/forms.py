"""Form configuration and live evaluation endpoints."""

from fastapi import APIRouter, HTTPException, status

from feedback_app.api.deps import DbSession, Engine
from feedback_app.core.config import settings
from feedback_app.models.form import Form
from feedback_app.flow.session import FormSession
from feedback_app.schemas.form import (
    EvaluateRequest,
    EvaluateResponse,
    FlagSetRead,
    FormRead,
    LogicRuleRead,
    QuestionRead,
)
from feedback_app.services.forms import FormNotFoundError, FormService, question_meta

router = APIRouter()


@router.get("/active", response_model=FormRead)
async def get_active_form(
    session: DbSession,
    slug: str | None = None,
) -> FormRead:
    """Get the active form with ordered questions, options and rules.

    A missing form is a load failure for the respondent; no partial form
    is returned.
    """
    service = FormService(session)
    try:
        form = await service.get_active_form(slug or settings.form_slug)
        questions = await service.get_questions(form.id)
    except FormNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active form found",
        )

    rules = await service.get_logic_rules(form.id)
    return _form_read(form, questions, rules)


@router.post("/{form_id}/evaluate", response_model=EvaluateResponse)
async def evaluate_answers(
    form_id: str,
    body: EvaluateRequest,
    session: DbSession,
    engine: Engine,
) -> EvaluateResponse:
    """Evaluate a partial answer set.

    Returns the visible question sequence together with the flags and tier
    the answers would produce if submitted now.
    """
    service = FormService(session)
    try:
        await service.get_form(form_id)
        questions = [question_meta(q) for q in await service.get_questions(form_id)]
    except FormNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Form '{form_id}' not found",
        )

    rules = await service.get_rules(form_id)
    flow = FormSession.restore(questions, rules, engine, body.answers)
    visible = flow.visible
    assessment = flow.snapshot()

    return EvaluateResponse(
        visible_question_ids=[q.id for q in visible],
        total_steps=len(visible),
        path_taken=flow.path_taken,
        success_message=flow.success_message,
        flags=FlagSetRead(**assessment.flags.to_dict()),
        tier=assessment.tier,
    )


def _form_read(form: Form, questions: list, rules: list) -> FormRead:
    return FormRead(
        id=form.id,
        name=form.name,
        slug=form.slug,
        description=form.description,
        estate_id=form.estate_id,
        version=form.version,
        questions=[QuestionRead.model_validate(q) for q in questions],
        rules=[LogicRuleRead.model_validate(r) for r in rules],
    )
