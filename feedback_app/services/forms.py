"""Form configuration queries used by the respondent flow and submissions."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from feedback_app.models.form import Form, LogicRule, Question
from feedback_app.rules.models import QuestionMeta, Rule, RuleDefinitionError

logger = logging.getLogger(__name__)


class FormNotFoundError(Exception):
    """No active form (or no active questions) matches the request."""


def rule_from_model(model: LogicRule) -> Rule:
    """Convert a stored logic rule into an engine Rule."""
    return Rule.from_dict(
        {
            "id": model.id,
            "source_question_id": model.source_question_id,
            "depends_on_question_id": model.depends_on_question_id,
            "operator": model.operator,
            "value_to_match": model.value_to_match,
            "action": model.action,
            "flag_type": model.flag_type,
        }
    )


def question_meta(question: Question) -> QuestionMeta:
    """Engine view of a stored question."""
    return QuestionMeta(
        id=question.id,
        question_type=question.question_type,
        category_tag=question.category_tag,
        required=question.is_required,
    )


class FormService:
    """Read access to forms, their ordered questions and logic rules."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_active_form(self, slug: str) -> Form:
        """Get the newest active form for a slug.

        Raises:
            FormNotFoundError: If no active form exists
        """
        result = await self.session.execute(
            select(Form)
            .where(Form.slug == slug)
            .where(Form.is_active == True)  # noqa: E712
            .order_by(Form.created_at.desc())
            .limit(1)
        )
        form = result.scalar_one_or_none()

        if not form:
            logger.warning(f"No active form found for slug '{slug}'")
            raise FormNotFoundError(f"No active form found for slug '{slug}'")

        return form

    async def get_form(self, form_id: str) -> Form:
        """Get a form by id.

        Raises:
            FormNotFoundError: If the form does not exist
        """
        form = await self.session.get(Form, form_id)
        if not form:
            raise FormNotFoundError(f"Form '{form_id}' not found")
        return form

    async def get_questions(self, form_id: str) -> list[Question]:
        """Active questions of a form in display order, options ordered.

        Raises:
            FormNotFoundError: If the form has no active questions
        """
        result = await self.session.execute(
            select(Question)
            .where(Question.form_id == form_id)
            .where(Question.is_active == True)  # noqa: E712
            .options(selectinload(Question.options))
            .order_by(Question.display_order)
            .execution_options(populate_existing=True)
        )
        questions = list(result.scalars().all())

        if not questions:
            logger.warning(f"Form '{form_id}' has no active questions")
            raise FormNotFoundError(f"Form '{form_id}' has no active questions")

        return questions

    async def get_logic_rules(self, form_id: str) -> list[LogicRule]:
        """All stored rules whose source question belongs to the form."""
        source = aliased(Question)
        result = await self.session.execute(
            select(LogicRule)
            .join(source, LogicRule.source_question_id == source.id)
            .where(source.form_id == form_id)
            .order_by(LogicRule.created_at)
        )
        return list(result.scalars().all())

    async def get_rules(self, form_id: str) -> list[Rule]:
        """Engine rules for a form.

        Rows that break the rule invariants are skipped and logged rather
        than failing the caller.
        """
        rules: list[Rule] = []
        for model in await self.get_logic_rules(form_id):
            try:
                rules.append(rule_from_model(model))
            except RuleDefinitionError as e:
                logger.warning(f"Skipping invalid logic rule {model.id}: {e}")
        return rules
