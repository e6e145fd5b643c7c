"""Database initialization utilities."""

import logging
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_app.core.config import settings
from feedback_app.db.base import Base
from feedback_app.db.session import engine
from feedback_app.models.form import Estate, Form, LogicRule, Question, QuestionOption
from feedback_app.rules.loader import load_form_definition
from feedback_app.rules.models import FLAG_KIND_ALIASES, OPERATOR_ALIASES

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    """Create all database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def seed_form(
    session: AsyncSession,
    filename: str,
    forms_dir: Path | None = None,
) -> Form | None:
    """Create a form, its questions, options and rules from a YAML definition.

    Args:
        session: Database session
        filename: Definition file under the forms directory
        forms_dir: Override for the forms directory

    Returns:
        Created form, or None if an active form with the same slug exists
    """
    definition, definition_hash = load_form_definition(filename, forms_dir)

    result = await session.execute(
        select(Form)
        .where(Form.slug == definition["slug"])
        .where(Form.is_active == True)  # noqa: E712
        .limit(1)
    )
    if result.scalar_one_or_none():
        logger.info(f"Form '{definition['slug']}' already exists, skipping seed")
        return None

    estate_data = definition.get("estate") or {"name": "Default Estate"}
    estate = Estate(
        name=estate_data["name"],
        city=estate_data.get("city"),
        state=estate_data.get("state"),
    )
    session.add(estate)
    await session.flush()

    form = Form(
        name=definition["name"],
        slug=definition["slug"],
        description=definition.get("description"),
        estate_id=estate.id,
        version=definition.get("version", 1),
        definition_hash=definition_hash,
        is_active=True,
    )
    session.add(form)
    await session.flush()

    questions_by_key: dict[str, Question] = {}
    for order, q in enumerate(definition.get("questions", []), start=1):
        question = Question(
            form_id=form.id,
            question_text=q["text"],
            helper_text=q.get("helper"),
            question_type=q["type"],
            category_tag=q.get("category"),
            path_tag=q.get("path"),
            is_required=q.get("required", False),
            placeholder_text=q.get("placeholder"),
            validation_rule=q.get("validation"),
            display_order=order,
        )
        session.add(question)
        await session.flush()
        questions_by_key[q["key"]] = question

        for option_order, opt in enumerate(q.get("options", []), start=1):
            session.add(
                QuestionOption(
                    question_id=question.id,
                    option_text=str(opt["text"]),
                    option_value=str(opt["value"]),
                    icon_emoji=opt.get("emoji"),
                    display_order=option_order,
                )
            )

    for r in definition.get("rules", []):
        operator = OPERATOR_ALIASES.get(r["operator"], r["operator"])
        flag_kind = r.get("flag_kind")
        session.add(
            LogicRule(
                source_question_id=questions_by_key[r["source"]].id,
                depends_on_question_id=questions_by_key[r["depends_on"]].id,
                operator=operator,
                value_to_match=str(r.get("value", "")),
                action=r["action"],
                flag_type=FLAG_KIND_ALIASES.get(flag_kind, flag_kind) if flag_kind else None,
            )
        )

    await session.commit()
    await session.refresh(form)

    logger.info(
        f"Seeded form '{form.slug}' v{form.version} with "
        f"{len(questions_by_key)} questions (hash={definition_hash[:12]})"
    )
    return form


async def init_db(session: AsyncSession) -> None:
    """Initialize database with required data.

    Args:
        session: Database session
    """
    await create_tables()
    await seed_form(session, settings.form_definition_file)
    logger.info("Database initialization complete")
