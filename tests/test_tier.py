"""Tests for customer tier classification and the shared assessment."""

import pytest

from feedback_app.rules.assessment import EngineConfig, assess
from feedback_app.rules.models import CustomerTier, FlagSet, Multi, QuestionMeta, Scalar
from feedback_app.rules.tier import TierBands, classify_tier

BANDS = TierBands.from_lists(
    ["lt_5000", "5000_10000", "10000_15000", "gt_15000"],
    ["lt_10gb", "10_25gb", "25_50gb", "gt_50gb"],
)


def tier(wtp: str | None, usage: str | None) -> CustomerTier:
    answers = {}
    if wtp is not None:
        answers["wtp"] = Scalar(wtp)
    if usage is not None:
        answers["usage"] = Scalar(usage)
    return classify_tier(answers, "wtp", "usage", BANDS)


class TestClassifyTier:
    """Band conjunction, budget fallback and missing answers."""

    @pytest.mark.parametrize("wtp", ["10000_15000", "gt_15000"])
    @pytest.mark.parametrize("usage", ["25_50gb", "gt_50gb"])
    def test_high_value_needs_both_top_bands(self, wtp: str, usage: str) -> None:
        """Test both top-two bands together give high_value."""
        assert tier(wtp, usage) == CustomerTier.HIGH_VALUE

    def test_top_price_alone_is_standard(self) -> None:
        """Test a top price band with low usage is standard."""
        assert tier("gt_15000", "lt_10gb") == CustomerTier.STANDARD

    def test_top_usage_alone_with_mid_price_is_standard(self) -> None:
        """Test top usage with a middle price band is standard."""
        assert tier("5000_10000", "gt_50gb") == CustomerTier.STANDARD

    def test_lowest_price_is_budget_regardless_of_usage(self) -> None:
        """Test the lowest price band is budget at any usage level."""
        assert tier("lt_5000", "lt_10gb") == CustomerTier.BUDGET
        assert tier("lt_5000", "gt_50gb") == CustomerTier.BUDGET

    def test_missing_answer_is_standard(self) -> None:
        """Test an unanswered band question gives standard."""
        assert tier(None, "gt_50gb") == CustomerTier.STANDARD
        assert tier("gt_15000", None) == CustomerTier.STANDARD
        assert tier("lt_5000", None) == CustomerTier.STANDARD
        assert tier(None, None) == CustomerTier.STANDARD

    def test_missing_question_is_standard(self) -> None:
        """Test a form without band questions gives standard."""
        answers = {"wtp": Scalar("gt_15000"), "usage": Scalar("gt_50gb")}

        assert classify_tier(answers, None, "usage", BANDS) == CustomerTier.STANDARD
        assert classify_tier(answers, "wtp", None, BANDS) == CustomerTier.STANDARD

    def test_unknown_band_is_standard(self) -> None:
        """Test a value outside the configured bands ranks nowhere."""
        assert tier("free", "gt_50gb") == CustomerTier.STANDARD

    def test_multi_answer_has_no_band(self) -> None:
        """Test a multi-select answer is not treated as a band."""
        answers = {"wtp": Multi(("gt_15000",)), "usage": Scalar("gt_50gb")}

        assert classify_tier(answers, "wtp", "usage", BANDS) == CustomerTier.STANDARD

    def test_short_band_lists(self) -> None:
        """Test ranks work with only two bands configured."""
        bands = TierBands.from_lists(["cheap", "premium"], ["light", "heavy"])
        answers = {"wtp": Scalar("cheap"), "usage": Scalar("light")}

        # With two bands, every band is in the top two
        assert classify_tier(answers, "wtp", "usage", bands) == CustomerTier.HIGH_VALUE


class TestAssess:
    """Flags and tier computed together from question metadata."""

    QUESTIONS = [
        QuestionMeta(id="q-entry", question_type="single_choice", category_tag="entry"),
        QuestionMeta(id="q-wtp", question_type="single_choice", category_tag="willingness_to_pay"),
        QuestionMeta(id="q-usage", question_type="single_choice", category_tag="usage_volume"),
    ]

    def test_top_bands_end_to_end(self) -> None:
        """Test top bands on both questions give high_value."""
        config = EngineConfig(
            bands=TierBands.from_lists(
                ["low_band", "mid_band", "upper_band", "top_band"],
                ["low_band", "mid_band", "upper_band", "top_band"],
            )
        )
        answers = {"q-wtp": Scalar("top_band"), "q-usage": Scalar("top_band")}

        result = assess([], answers, self.QUESTIONS, config)

        assert result.tier == CustomerTier.HIGH_VALUE
        assert result.flags == FlagSet()

    def test_urgent_entry_end_to_end(self) -> None:
        """Test the urgent entry alone gives priority and standard tier."""
        config = EngineConfig(bands=BANDS)

        result = assess([], {"q-entry": Scalar("PATH_D")}, self.QUESTIONS, config)

        assert result.flags == FlagSet(priority=True)
        assert result.tier == CustomerTier.STANDARD

    def test_configured_urgent_marker(self) -> None:
        """Test the urgent marker comes from configuration."""
        config = EngineConfig(bands=BANDS, urgent_path_marker="PATH_Z")

        assert not assess([], {"q-entry": Scalar("PATH_D")}, self.QUESTIONS, config).flags.priority
        assert assess([], {"q-entry": Scalar("PATH_Z")}, self.QUESTIONS, config).flags.priority

    def test_no_entry_question(self) -> None:
        """Test forms without an entry question never force priority."""
        config = EngineConfig(bands=BANDS)

        result = assess([], {"q-entry": Scalar("PATH_D")}, self.QUESTIONS[1:], config)

        assert result.flags.priority is False

    def test_engine_config_from_settings(self, engine_config) -> None:
        """Test default settings carry the default bands and marker."""
        assert engine_config.urgent_path_marker == "PATH_D"
        assert engine_config.entry_category_tag == "entry"
        assert engine_config.bands.price_rank("gt_15000") == 3
        assert engine_config.bands.usage_rank("lt_10gb") == 0
