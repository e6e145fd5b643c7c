"""Customer tier classification from willingness-to-pay and usage answers."""

from dataclasses import dataclass
from typing import Optional, Sequence

from feedback_app.rules.models import Answer, Answers, CustomerTier, Scalar


@dataclass(frozen=True)
class TierBands:
    """Ordered band identifiers, lowest first."""

    price_bands: tuple[str, ...]
    usage_bands: tuple[str, ...]

    @classmethod
    def from_lists(cls, price_bands: Sequence[str], usage_bands: Sequence[str]) -> "TierBands":
        return cls(price_bands=tuple(price_bands), usage_bands=tuple(usage_bands))

    def price_rank(self, band: str) -> Optional[int]:
        return _rank(self.price_bands, band)

    def usage_rank(self, band: str) -> Optional[int]:
        return _rank(self.usage_bands, band)


def _rank(bands: tuple[str, ...], band: str) -> Optional[int]:
    try:
        return bands.index(band)
    except ValueError:
        return None


def _in_top_two(rank: Optional[int], bands: tuple[str, ...]) -> bool:
    return rank is not None and rank >= len(bands) - 2


def _band_of(answer: Optional[Answer]) -> Optional[str]:
    # Band questions are single choice; a multi-select answer has no band.
    if isinstance(answer, Scalar):
        return answer.value
    return None


def classify_tier(
    answers: Answers,
    willingness_to_pay_question_id: Optional[str],
    usage_volume_question_id: Optional[str],
    bands: TierBands,
) -> CustomerTier:
    """Classify a respondent into a customer tier.

    high_value needs both a top-two price band and a top-two usage band.
    Failing that, the lowest price band is budget. Everything else,
    including a missing answer to either question, is standard.
    """
    if willingness_to_pay_question_id is None or usage_volume_question_id is None:
        return CustomerTier.STANDARD

    wtp = _band_of(answers.get(willingness_to_pay_question_id))
    usage = _band_of(answers.get(usage_volume_question_id))
    if wtp is None or usage is None:
        return CustomerTier.STANDARD

    price_rank = bands.price_rank(wtp)
    usage_rank = bands.usage_rank(usage)

    if _in_top_two(price_rank, bands.price_bands) and _in_top_two(usage_rank, bands.usage_bands):
        return CustomerTier.HIGH_VALUE

    if price_rank == 0:
        return CustomerTier.BUDGET

    return CustomerTier.STANDARD
