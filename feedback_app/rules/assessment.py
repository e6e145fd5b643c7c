"""Flag and tier assessment shared by the live flow and the submission processor."""

from dataclasses import dataclass
from typing import Any, Sequence

from feedback_app.rules.flags import compute_flags
from feedback_app.rules.models import Answers, CustomerTier, FlagSet, QuestionMeta, Rule, find_question
from feedback_app.rules.tier import TierBands, classify_tier

WILLINGNESS_TO_PAY_TAG = "willingness_to_pay"
USAGE_VOLUME_TAG = "usage_volume"


@dataclass(frozen=True)
class EngineConfig:
    """Configuration both execution sites must share to agree."""

    bands: TierBands
    entry_category_tag: str = "entry"
    urgent_path_marker: str = "PATH_D"

    @classmethod
    def from_settings(cls, settings: Any) -> "EngineConfig":
        return cls(
            bands=TierBands.from_lists(settings.price_bands, settings.usage_bands),
            entry_category_tag=settings.entry_category_tag,
            urgent_path_marker=settings.urgent_path_marker,
        )


@dataclass(frozen=True)
class Assessment:
    """Flags and tier of one answer set."""

    flags: FlagSet
    tier: CustomerTier


def assess(
    rules: Sequence[Rule],
    answers: Answers,
    questions: Sequence[QuestionMeta],
    config: EngineConfig,
) -> Assessment:
    """Compute flags (with the urgent-path override) and customer tier."""
    question_list = list(questions)
    entry = find_question(question_list, config.entry_category_tag)
    wtp = find_question(question_list, WILLINGNESS_TO_PAY_TAG)
    usage = find_question(question_list, USAGE_VOLUME_TAG)

    flags = compute_flags(
        rules,
        answers,
        entry_question_id=entry.id if entry else None,
        urgent_path_marker=config.urgent_path_marker,
    )
    tier = classify_tier(
        answers,
        wtp.id if wtp else None,
        usage.id if usage else None,
        config.bands,
    )
    return Assessment(flags=flags, tier=tier)
