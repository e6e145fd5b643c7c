"""Question visibility resolution."""

from typing import Iterable, Sequence, TypeVar

from feedback_app.rules.evaluator import evaluate
from feedback_app.rules.models import Answers, Rule, RuleAction

Q = TypeVar("Q")


def is_visible(question_id: str, rules: Iterable[Rule], answers: Answers) -> bool:
    """Decide whether a question should be shown.

    Questions without show/hide rules are always visible. A matching hide
    rule wins over any show rule; otherwise at least one show rule must
    match when show rules exist.
    """
    show_rules: list[Rule] = []
    hide_rules: list[Rule] = []

    for rule in rules:
        if rule.source_question_id != question_id:
            continue
        if rule.action == RuleAction.SHOW:
            show_rules.append(rule)
        elif rule.action == RuleAction.HIDE:
            hide_rules.append(rule)

    if not show_rules and not hide_rules:
        return True

    if any(evaluate(rule, answers) for rule in hide_rules):
        return False

    if show_rules:
        return any(evaluate(rule, answers) for rule in show_rules)

    return True


def visible_questions(
    questions: Sequence[Q],
    rules: Sequence[Rule],
    answers: Answers,
) -> list[Q]:
    """Filter questions (already in display order) down to the visible ones.

    Each question only needs an ``id`` attribute.
    """
    return [q for q in questions if is_visible(q.id, rules, answers)]  # type: ignore[attr-defined]
