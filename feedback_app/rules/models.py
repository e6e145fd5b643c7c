"""Rule, answer and flag data models for the form-logic engine."""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional, Union


class RuleOperator(str, Enum):
    """Operators for comparing a dependency answer to a rule's match value."""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    INCLUDES = "includes"
    EXCLUDES = "excludes"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"


class RuleAction(str, Enum):
    """Effect a rule has on its source question."""
    SHOW = "show"
    HIDE = "hide"
    REQUIRE = "require"  # stored but not enforced
    FLAG = "flag"


class FlagKind(str, Enum):
    """Triage flags that can be raised on a submission."""
    PRIORITY = "priority"
    CHURN_RISK = "churn_risk"
    HIGH_REFERRER = "high_referrer"
    UPSELL_CANDIDATE = "upsell_candidate"


class CustomerTier(str, Enum):
    """Coarse value classification of a respondent."""
    HIGH_VALUE = "high_value"
    STANDARD = "standard"
    BUDGET = "budget"


# Names used by older rule rows and the admin editor
OPERATOR_ALIASES = {
    "=": RuleOperator.EQUALS.value,
    "!=": RuleOperator.NOT_EQUALS.value,
}

FLAG_KIND_ALIASES = {
    "priority_flag": FlagKind.PRIORITY.value,
    "churn_risk_flag": FlagKind.CHURN_RISK.value,
    "high_referrer_flag": FlagKind.HIGH_REFERRER.value,
}


class RuleDefinitionError(ValueError):
    """Raised when a rule definition breaks the action/flag_kind invariant."""


@dataclass(frozen=True)
class Scalar:
    """Answer to a single-value question."""
    value: str

    @property
    def values(self) -> tuple[str, ...]:
        return (self.value,)


@dataclass(frozen=True)
class Multi:
    """Answer to a multi-select question, in selection order."""
    items: tuple[str, ...]

    @property
    def values(self) -> tuple[str, ...]:
        return self.items


Answer = Union[Scalar, Multi]
Answers = Mapping[str, Answer]


def to_answer(raw: Any) -> Optional[Answer]:
    """Convert a raw captured value into an Answer.

    Lists become Multi, everything else becomes Scalar. None means the
    question was not answered.
    """
    if raw is None:
        return None
    if isinstance(raw, (Scalar, Multi)):
        return raw
    if isinstance(raw, (list, tuple)):
        return Multi(tuple(str(item) for item in raw))
    return Scalar(str(raw))


def parse_answers(raw_answers: Mapping[str, Any]) -> dict[str, Answer]:
    """Build an answer set from a raw question id -> value mapping."""
    answers: dict[str, Answer] = {}
    for question_id, raw in raw_answers.items():
        answer = to_answer(raw)
        if answer is not None:
            answers[question_id] = answer
    return answers


def answer_to_raw(answer: Answer) -> Union[str, list[str]]:
    """Inverse of to_answer, for JSON payloads."""
    if isinstance(answer, Multi):
        return list(answer.items)
    return answer.value


@dataclass(frozen=True)
class Rule:
    """A conditional rule attached to a source question.

    ``operator`` and ``action`` are kept as plain strings so rows with values
    this engine does not know about still load; they simply never match.
    """
    id: str
    source_question_id: str
    depends_on_question_id: str
    operator: str
    match_value: str
    action: str
    flag_kind: Optional[str] = None

    def __post_init__(self) -> None:
        is_flag = self.action == RuleAction.FLAG
        if is_flag and not self.flag_kind:
            raise RuleDefinitionError(f"Rule '{self.id}' has action 'flag' but no flag_kind")
        if not is_flag and self.flag_kind:
            raise RuleDefinitionError(
                f"Rule '{self.id}' has flag_kind '{self.flag_kind}' but action '{self.action}'"
            )
        if is_flag and self.flag_kind not in {kind.value for kind in FlagKind}:
            raise RuleDefinitionError(f"Rule '{self.id}' has unknown flag_kind '{self.flag_kind}'")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rule":
        """Create a Rule from a dict, accepting storage and legacy field names."""
        operator = str(data["operator"])
        flag_kind = data.get("flag_kind", data.get("flag_type"))
        if flag_kind is not None:
            flag_kind = FLAG_KIND_ALIASES.get(flag_kind, flag_kind)

        return cls(
            id=str(data["id"]),
            source_question_id=str(data["source_question_id"]),
            depends_on_question_id=str(data["depends_on_question_id"]),
            operator=OPERATOR_ALIASES.get(operator, operator),
            match_value=str(data.get("match_value", data.get("value_to_match", ""))),
            action=str(data["action"]),
            flag_kind=flag_kind,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert Rule to dictionary representation."""
        return {
            "id": self.id,
            "source_question_id": self.source_question_id,
            "depends_on_question_id": self.depends_on_question_id,
            "operator": self.operator,
            "match_value": self.match_value,
            "action": self.action,
            "flag_kind": self.flag_kind,
        }


@dataclass(frozen=True)
class QuestionMeta:
    """The parts of a question the engine reads."""
    id: str
    question_type: str
    category_tag: Optional[str] = None
    required: bool = False


def find_question(
    questions: list[QuestionMeta],
    category_tag: str,
    question_type: Optional[str] = None,
) -> Optional[QuestionMeta]:
    """Return the first question with the given tag (and type, if given)."""
    for question in questions:
        if question.category_tag != category_tag:
            continue
        if question_type is not None and question.question_type != question_type:
            continue
        return question
    return None


@dataclass(frozen=True)
class FlagSet:
    """The four triage flags of one submission."""
    priority: bool = False
    churn_risk: bool = False
    high_referrer: bool = False
    upsell_candidate: bool = False

    def raised(self, kind: str) -> "FlagSet":
        """Return a copy with the given flag set."""
        return replace(self, **{FlagKind(kind).value: True})

    def to_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
