"""Form, question and logic rule models.

Forms are configured by administrators ahead of time and are read-only
while a respondent fills them in.
"""

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedback_app.db.base import Base, TimestampMixin


class Estate(Base, TimestampMixin):
    """Residential estate served by the ISP."""

    __tablename__ = "estates"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Estate {self.name}>"


class Form(Base, TimestampMixin):
    """Feedback form shown to respondents of one estate."""

    __tablename__ = "forms"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    estate_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("estates.id"),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    # A/B variant label, unused by the engine
    ab_variant: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # SHA256 of the YAML definition the form was seeded from
    definition_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    questions: Mapped[list["Question"]] = relationship(
        "Question",
        back_populates="form",
        order_by="Question.display_order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Form {self.slug} v{self.version}>"


class Question(Base, TimestampMixin):
    """A single question of a form."""

    __tablename__ = "questions"

    form_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    helper_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    # single_choice, multiple_choice, dropdown, text, textarea,
    # rating_scale, number, phone, email
    question_type: Mapped[str] = mapped_column(String(50), nullable=False)
    # Free-form classification read by the engine (entry, identity, ...)
    category_tag: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    # Branch of the form this question belongs to (ENTRY, PATH_A, UNIVERSAL, ...)
    path_tag: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    placeholder_text: Mapped[str | None] = mapped_column(String(255), nullable=True)
    validation_rule: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    form: Mapped["Form"] = relationship("Form", back_populates="questions")
    options: Mapped[list["QuestionOption"]] = relationship(
        "QuestionOption",
        back_populates="question",
        order_by="QuestionOption.display_order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Question {self.category_tag or self.id[:8]} ({self.question_type})>"


class QuestionOption(Base, TimestampMixin):
    """Selectable option of a choice question."""

    __tablename__ = "question_options"

    question_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    option_text: Mapped[str] = mapped_column(String(255), nullable=False)
    option_value: Mapped[str] = mapped_column(String(255), nullable=False)
    icon_emoji: Mapped[str | None] = mapped_column(String(16), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    question: Mapped["Question"] = relationship("Question", back_populates="options")


class LogicRule(Base, TimestampMixin):
    """Conditional rule linking one question's answer to an effect."""

    __tablename__ = "logic_rules"

    # Question whose visibility/flag this rule governs
    source_question_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Question whose answer is inspected
    depends_on_question_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
    )
    operator: Mapped[str] = mapped_column(String(50), nullable=False)
    value_to_match: Mapped[str] = mapped_column(Text, nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    flag_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "(action = 'flag') = (flag_type IS NOT NULL)",
            name="flag_type_iff_flag_action",
        ),
    )

    def __repr__(self) -> str:
        return f"<LogicRule {self.action} {self.operator} {self.value_to_match!r}>"
