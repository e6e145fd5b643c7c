"""Pydantic schemas for form configuration and live evaluation."""

from typing import Any

from pydantic import BaseModel, Field

from feedback_app.rules.models import CustomerTier


class QuestionOptionRead(BaseModel):
    """Schema for reading a question option."""

    id: str
    option_text: str
    option_value: str
    icon_emoji: str | None = None
    display_order: int

    model_config = {"from_attributes": True}


class QuestionRead(BaseModel):
    """Schema for reading a question with its ordered options."""

    id: str
    question_text: str
    helper_text: str | None = None
    question_type: str
    category_tag: str | None = None
    path_tag: str | None = None
    is_required: bool
    display_order: int
    placeholder_text: str | None = None
    validation_rule: dict[str, Any] | None = None
    options: list[QuestionOptionRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class LogicRuleRead(BaseModel):
    """Schema for reading a logic rule."""

    id: str
    source_question_id: str
    depends_on_question_id: str
    operator: str
    value_to_match: str
    action: str
    flag_type: str | None = None

    model_config = {"from_attributes": True}


class FormRead(BaseModel):
    """Active form with everything a renderer needs."""

    id: str
    name: str
    slug: str
    description: str | None = None
    estate_id: str | None = None
    version: int
    questions: list[QuestionRead]
    rules: list[LogicRuleRead]


class EvaluateRequest(BaseModel):
    """Partial answer set to evaluate against a form."""

    answers: dict[str, str | list[str] | None] = Field(default_factory=dict)


class FlagSetRead(BaseModel):
    """The four triage flags."""

    priority: bool
    churn_risk: bool
    high_referrer: bool
    upsell_candidate: bool


class EvaluateResponse(BaseModel):
    """Visible question sequence and flag/tier snapshot."""

    visible_question_ids: list[str]
    total_steps: int
    path_taken: str | None = None
    success_message: str
    flags: FlagSetRead
    tier: CustomerTier
