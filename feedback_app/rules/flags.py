"""Flag computation for submissions."""

from typing import Iterable, Optional

from feedback_app.rules.evaluator import evaluate
from feedback_app.rules.models import Answers, FlagKind, FlagSet, Rule, RuleAction, Scalar


def compute_flags(
    rules: Iterable[Rule],
    answers: Answers,
    entry_question_id: Optional[str] = None,
    urgent_path_marker: Optional[str] = None,
) -> FlagSet:
    """Compute the flag set for an answer set.

    Every matching ``flag`` rule raises its flag; flags are only ever
    raised, never cleared. The urgent-path override is applied last when
    an entry question is given.
    """
    flags = FlagSet()

    for rule in rules:
        if rule.action != RuleAction.FLAG or not rule.flag_kind:
            continue
        if evaluate(rule, answers):
            flags = flags.raised(rule.flag_kind)

    if entry_question_id is not None and urgent_path_marker is not None:
        flags = apply_urgent_path_override(
            flags, answers, entry_question_id, urgent_path_marker
        )

    return flags


def apply_urgent_path_override(
    flags: FlagSet,
    answers: Answers,
    entry_question_id: str,
    urgent_path_marker: str,
) -> FlagSet:
    """Force the priority flag when the respondent took the urgent path.

    This is not expressible as a configured rule and always wins.
    """
    if answers.get(entry_question_id) == Scalar(urgent_path_marker):
        return flags.raised(FlagKind.PRIORITY)
    return flags
