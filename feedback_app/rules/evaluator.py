"""Single-rule evaluation against an answer set.

The same function backs the live session flow and the authoritative
submission processor, so it must stay pure and deterministic. It never
raises for malformed answers: anything it cannot interpret is a non-match.
"""

import math

from feedback_app.rules.models import Answers, Rule, RuleOperator


def evaluate(rule: Rule, answers: Answers) -> bool:
    """Return True if the rule's condition holds for the given answers.

    A rule never matches an unanswered dependency.
    """
    answer = answers.get(rule.depends_on_question_id)
    if answer is None:
        return False

    values = answer.values
    expected = rule.match_value
    op = rule.operator

    if op == RuleOperator.EQUALS:
        return expected in values
    elif op == RuleOperator.NOT_EQUALS:
        return expected not in values
    elif op == RuleOperator.INCLUDES:
        return _contains(values, expected)
    elif op == RuleOperator.EXCLUDES:
        return not _contains(values, expected)
    elif op == RuleOperator.GREATER_THAN:
        return _first_number(values) > _to_number(expected)
    elif op == RuleOperator.LESS_THAN:
        return _first_number(values) < _to_number(expected)

    return False


def _contains(values: tuple[str, ...], expected: str) -> bool:
    """Equality or substring match against any element."""
    return any(value == expected or expected in value for value in values)


def _first_number(values: tuple[str, ...]) -> float:
    if not values:
        return math.nan
    return _to_number(values[0])


# The only spelled-out infinities a browser number parse accepts
_INFINITIES = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}


def _to_number(text: str) -> float:
    """Parse a numeric string; anything else is NaN (which compares False).

    Only decimal notation and the exact "Infinity" spellings are numbers;
    "inf", "nan" and "infinity" are not.
    """
    text = text.strip()
    if text in _INFINITIES:
        return _INFINITIES[text]
    if not text or "_" in text or any(c.isalpha() and c not in "eE" for c in text):
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan
