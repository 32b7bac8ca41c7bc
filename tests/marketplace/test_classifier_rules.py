"""Tests for the keyword classifier and confidence scoring."""

import pytest

from tradeline.classifier import ClassificationResult, KeywordClassifier
from tradeline.classifier.scoring import NO_MATCH_CONFIDENCE, score_confidence
from tradeline.taxonomy import DEFAULT_TRADE, TRADES


@pytest.fixture
def classifier():
    return KeywordClassifier()


class TestScoreConfidence:
    def test_base_score(self):
        assert score_confidence(None, None, []) == 0.5

    def test_each_field_adds(self):
        assert score_confidence("Fix", "short", ["plumbing"]) == 0.7
        assert score_confidence("Fix tap", "short", ["plumbing"]) == 0.75
        assert score_confidence("Fix tap", "x" * 31, ["plumbing"], "high") == 0.9

    def test_capped(self):
        assert score_confidence("Fix tap", "x" * 31, ["plumbing"], "high", 100.0) == 0.99

    def test_zero_budget_counts(self):
        assert score_confidence(None, None, [], budget=0.0) == 0.6


class TestKeywordClassifier:
    def test_plumbing_with_urgency_and_budget(self, classifier):
        result = classifier.classify("Leaking tap in the kitchen, urgent. Budget €150")

        assert result.trade_tags == ["plumbing"]
        assert result.urgency == "high"
        assert result.budget_estimate == 150.0
        assert result.title == "Leaking tap in the kitchen, urgent"
        assert result.strategy == "local"
        assert result.raw is None
        assert result.confidence == 0.99

    def test_location_hint(self, classifier):
        result = classifier.classify(
            "Kitchen socket sparks, need an electrician in North Dublin asap"
        )
        assert result.trade_tags == ["electrical"]
        assert result.location_hint == "North Dublin"
        assert result.urgency == "high"

    def test_multiple_trades_in_rule_order(self, classifier):
        result = classifier.classify("Replace the radiator and fix the light switch")
        assert result.trade_tags == ["electrical", "heating_gas"]

    def test_not_urgent_wins_over_urgent(self, classifier):
        result = classifier.classify("Not urgent, whenever suits. Garden fence needs fixing")
        assert result.urgency == "low"
        assert result.trade_tags == ["landscaping"]

    def test_medium_urgency(self, classifier):
        assert classifier.classify("Paint the bedroom this week").urgency == "medium"

    def test_budget_suffix_forms(self, classifier):
        assert classifier.classify("Roof repair, about 1,200 euros").budget_estimate == 1200.0
        assert classifier.classify("Fix my gutter for 80 USD").budget_estimate == 80.0

    def test_keywords_match_whole_words(self, classifier):
        # "tap" must not fire inside "untapped"
        result = classifier.classify("Untapped potential in the hedge")
        assert "plumbing" not in result.trade_tags
        assert result.trade_tags == ["landscaping"]

    @pytest.mark.parametrize(
        "text,unexpected",
        [
            ("Need some tape for the hedge", "plumbing"),
            ("Waterproof cover for the patio", "plumbing"),
            ("Oven door gasket has split", "heating_gas"),
            ("Keyboard shelf for the office", "locksmithing"),
            ("Hang new wallpaper in the lounge", "building_construction"),
        ],
    )
    def test_longer_words_do_not_match_keywords(self, classifier, text, unexpected):
        assert unexpected not in classifier.classify(text).trade_tags

    def test_plurals_and_listed_forms_match(self, classifier):
        result = classifier.classify("Both taps leaking and the plasterer left cracked walls")
        assert result.trade_tags == ["plumbing", "plastering", "building_construction"]

    def test_no_match_uses_default_trade(self, classifier):
        result = classifier.classify("Something odd is happening")
        assert result.trade_tags == [DEFAULT_TRADE]
        assert result.confidence <= NO_MATCH_CONFIDENCE

    def test_title_is_first_sentence_capped(self, classifier):
        text = "A" * 80 + ". Second sentence about a tap."
        result = classifier.classify(text)
        assert result.title == "A" * 60

    def test_description_collapses_whitespace(self, classifier):
        result = classifier.classify("Broken   boiler\n\nno heating")
        assert result.description == "Broken boiler no heating"
        assert result.title == "Broken boiler"

    def test_deterministic(self, classifier):
        text = "Dishwasher leaking water onto the kitchen floor"
        assert classifier.classify(text) == classifier.classify(text)

    def test_every_tag_in_taxonomy(self, classifier):
        result = classifier.classify(
            "Locked out, window glass broken, carpet wet, oven dead, wallpaper peeling"
        )
        assert result.trade_tags
        assert set(result.trade_tags) <= set(TRADES)


class TestClassificationResult:
    def test_confidence_bounds(self):
        with pytest.raises(ValueError):
            ClassificationResult(title="t", description="d", confidence=1.2)

    def test_strategy_validated(self):
        with pytest.raises(ValueError):
            ClassificationResult(title="t", description="d", strategy="magic")

    def test_to_dict_omits_raw(self):
        result = ClassificationResult(
            title="t", description="d", trade_tags=["plumbing"], strategy="remote", raw="{}"
        )
        assert "raw" not in result.to_dict()
        assert result.to_dict()["trade_tags"] == ["plumbing"]
