"""Initial schema: estates, forms, questions, rules, responses, answers.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create initial database schema."""

    op.create_table(
        "estates",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, default=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_estates"),
    )

    op.create_table(
        "forms",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("estate_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, default=True),
        sa.Column("version", sa.Integer(), nullable=False, default=1),
        sa.Column("ab_variant", sa.String(50), nullable=True),
        sa.Column("definition_hash", sa.String(64), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["estate_id"], ["estates.id"], name="fk_forms_estate_id_estates"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_forms"),
    )
    op.create_index("ix_forms_slug", "forms", ["slug"])

    op.create_table(
        "questions",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("form_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("helper_text", sa.Text(), nullable=True),
        sa.Column("question_type", sa.String(50), nullable=False),
        sa.Column("category_tag", sa.String(100), nullable=True),
        sa.Column("path_tag", sa.String(50), nullable=True),
        sa.Column("is_required", sa.Boolean(), nullable=False, default=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, default=True),
        sa.Column("display_order", sa.Integer(), nullable=False, default=0),
        sa.Column("placeholder_text", sa.String(255), nullable=True),
        sa.Column("validation_rule", postgresql.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["form_id"], ["forms.id"], name="fk_questions_form_id_forms", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_questions"),
    )
    op.create_index("ix_questions_form_id", "questions", ["form_id"])
    op.create_index("ix_questions_category_tag", "questions", ["category_tag"])

    op.create_table(
        "question_options",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("question_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("option_text", sa.String(255), nullable=False),
        sa.Column("option_value", sa.String(255), nullable=False),
        sa.Column("icon_emoji", sa.String(16), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, default=0),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["question_id"],
            ["questions.id"],
            name="fk_question_options_question_id_questions",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_question_options"),
    )
    op.create_index("ix_question_options_question_id", "question_options", ["question_id"])

    op.create_table(
        "logic_rules",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("source_question_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("depends_on_question_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("operator", sa.String(50), nullable=False),
        sa.Column("value_to_match", sa.Text(), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("flag_type", sa.String(50), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["source_question_id"],
            ["questions.id"],
            name="fk_logic_rules_source_question_id_questions",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["depends_on_question_id"],
            ["questions.id"],
            name="fk_logic_rules_depends_on_question_id_questions",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint(
            "(action = 'flag') = (flag_type IS NOT NULL)",
            name="ck_logic_rules_flag_type_iff_flag_action",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_logic_rules"),
    )
    op.create_index("ix_logic_rules_source_question_id", "logic_rules", ["source_question_id"])

    op.create_table(
        "responses",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("form_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("estate_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("session_id", sa.String(100), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("device_type", sa.String(20), nullable=True),
        sa.Column("browser", sa.String(50), nullable=True),
        sa.Column("os", sa.String(50), nullable=True),
        sa.Column("referral_source", sa.String(255), nullable=True),
        sa.Column("utm_medium", sa.String(255), nullable=True),
        sa.Column("utm_campaign", sa.String(255), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("customer_tier", sa.String(20), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("is_duplicate", sa.Boolean(), nullable=False, default=False),
        # Triage flags
        sa.Column("priority_flag", sa.Boolean(), nullable=False, default=False),
        sa.Column("churn_risk_flag", sa.Boolean(), nullable=False, default=False),
        sa.Column("high_referrer_flag", sa.Boolean(), nullable=False, default=False),
        sa.Column("upsell_candidate", sa.Boolean(), nullable=False, default=False),
        sa.Column("submission_timestamp", sa.DateTime(timezone=True), nullable=False),
        # Admin review
        sa.Column("reviewed_by_admin", sa.Boolean(), nullable=False, default=False),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("legacy_import", sa.Boolean(), nullable=False, default=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["form_id"], ["forms.id"], name="fk_responses_form_id_forms"
        ),
        sa.ForeignKeyConstraint(
            ["estate_id"], ["estates.id"], name="fk_responses_estate_id_estates"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_responses"),
    )
    op.create_index("ix_responses_form_id", "responses", ["form_id"])
    op.create_index("ix_responses_phone_number", "responses", ["phone_number"])
    op.create_index("ix_responses_priority_flag", "responses", ["priority_flag"])
    op.create_index("ix_responses_submission_timestamp", "responses", ["submission_timestamp"])

    op.create_table(
        "answers",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("response_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("question_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("answer_value", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(
            ["response_id"],
            ["responses.id"],
            name="fk_answers_response_id_responses",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["question_id"], ["questions.id"], name="fk_answers_question_id_questions"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_answers"),
    )
    op.create_index("ix_answers_response_id", "answers", ["response_id"])
    op.create_index("ix_answers_question_value", "answers", ["question_id", "answer_value"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("answers")
    op.drop_table("responses")
    op.drop_table("logic_rules")
    op.drop_table("question_options")
    op.drop_table("questions")
    op.drop_table("forms")
    op.drop_table("estates")
