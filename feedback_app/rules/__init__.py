"""Conditional form-logic engine.

Decides which questions are visible, which triage flags a submission
raises and which customer tier a respondent falls into. Everything here is
pure so the live session flow and the submission processor evaluate the
same answers identically.
"""

from feedback_app.rules.assessment import Assessment, EngineConfig, assess
from feedback_app.rules.evaluator import evaluate
from feedback_app.rules.flags import apply_urgent_path_override, compute_flags
from feedback_app.rules.loader import (
    FormDefinitionLoader,
    compute_definition_hash,
    load_form_definition,
)
from feedback_app.rules.models import (
    Answer,
    Answers,
    CustomerTier,
    FlagKind,
    FlagSet,
    Multi,
    QuestionMeta,
    Rule,
    RuleAction,
    RuleDefinitionError,
    RuleOperator,
    Scalar,
    find_question,
    parse_answers,
    to_answer,
)
from feedback_app.rules.tier import TierBands, classify_tier
from feedback_app.rules.visibility import is_visible, visible_questions

__all__ = [
    "Answer",
    "Answers",
    "Assessment",
    "CustomerTier",
    "EngineConfig",
    "FlagKind",
    "FlagSet",
    "FormDefinitionLoader",
    "Multi",
    "QuestionMeta",
    "Rule",
    "RuleAction",
    "RuleDefinitionError",
    "RuleOperator",
    "Scalar",
    "TierBands",
    "apply_urgent_path_override",
    "assess",
    "classify_tier",
    "compute_definition_hash",
    "compute_flags",
    "evaluate",
    "find_question",
    "is_visible",
    "load_form_definition",
    "parse_answers",
    "to_answer",
    "visible_questions",
]
