"""
Unit tests for wastewise.models.disposal_classifier.
"""

import pytest

from wastewise.models.disposal_classifier import (
    DecisionPath,
    DisposalOutcome,
    Prediction,
    classify,
    score_predictions,
    select_category,
)
from wastewise.models.disposal_tables import (
    CONTAINER_FALLBACK_NOTE,
    PAPER_FALLBACK_NOTE,
    WASTE_MAP,
    WasteCategory,
)


def preds(*pairs):
    return [Prediction(label=label, score=score) for label, score in pairs]


class TestEmptyInput:
    """Tests for empty or missing predictions."""

    def test_empty_list_returns_unknown_fallback(self):
        verdict = classify([])

        assert verdict.profile_id == "UNKNOWN_FALLBACK"
        assert verdict.raw_label == "N/A"
        assert verdict.decided_by == DecisionPath.EMPTY
        assert verdict.recyclable is False

    def test_none_returns_unknown_fallback(self):
        verdict = classify(None)

        assert verdict.profile_id == "UNKNOWN_FALLBACK"
        assert verdict.raw_label == "N/A"


class TestSafetyOverride:
    """Tests for the broken glass override."""

    @pytest.mark.parametrize("label", ["Shattered windshield", "SHATTERED", "broken glass", "Broken Cup", "cut glass bowl"])
    def test_hazardous_top_label_is_special(self, label):
        verdict = classify(preds((label, 0.05)))

        assert verdict.profile_id == "broken_glass_special"
        assert verdict.special is True
        assert verdict.recyclable is False
        assert verdict.decided_by == DecisionPath.SAFETY_OVERRIDE

    def test_override_beats_a_strong_vote(self):
        verdict = classify(preds(
            ("shattered", 0.01),
            ("plastic bag", 0.99),
            ("grocery bag", 0.99),
            ("shopping bag", 0.99),
        ))

        assert verdict.profile_id == "broken_glass_special"
        assert verdict.raw_label == "shattered"

    def test_override_only_checks_top_label(self):
        verdict = classify(preds(("plastic bag", 0.9), ("shattered", 0.9)))

        assert verdict.profile_id == "plastic_film_trash"


class TestVoting:
    """Tests for keyword-weighted voting."""

    def test_plastic_bag(self):
        verdict = classify([{"label": "plastic bag", "score": 0.9}])

        assert verdict.profile_id == "plastic_film_trash"
        assert verdict.recyclable is False
        assert verdict.decided_by == DecisionPath.VOTE

    def test_plastic_bag_score(self):
        scores = score_predictions(preds(("plastic bag", 0.9)))

        assert scores[WasteCategory.PLASTIC_FILM] == pytest.approx(1.0)

    def test_banana_peel_is_compostable(self):
        verdict = classify(preds(("banana peel", 0.8)))

        assert verdict.profile_id == "organic_compost"
        assert verdict.compostable is True
        assert verdict.recyclable is False
        assert verdict.outcome == DisposalOutcome.COMPOSTABLE

    def test_cardboard_beats_paper(self):
        predictions = preds(("cardboard box", 0.5), ("paper bag", 0.1))

        scores = score_predictions(predictions)
        verdict = classify(predictions)

        assert scores[WasteCategory.PAPER] == pytest.approx(0.2)
        assert scores[WasteCategory.CARDBOARD] > scores[WasteCategory.PAPER]
        assert verdict.profile_id == "cardboard_default"

    def test_label_matches_multiple_categories(self):
        scores = score_predictions(preds(("water bottle", 0.5)))

        assert scores[WasteCategory.RIGID_PLASTIC] == pytest.approx(0.6)
        assert scores[WasteCategory.GLASS] == pytest.approx(0.6)

    def test_label_is_lowercased_and_trimmed(self):
        scores = score_predictions(preds(("  Tin CAN  ", 0.4)))

        # 'tin' and 'can' both hit
        assert scores[WasteCategory.METAL] == pytest.approx(1.0)

    def test_only_first_five_predictions_count(self):
        predictions = preds(
            ("dog", 0.9), ("cat", 0.9), ("tree", 0.9), ("sky", 0.9), ("road", 0.9),
            ("plastic bag", 0.9),
        )

        scores = score_predictions(predictions)

        assert all(score == 0 for score in scores.values())
        assert classify(predictions).profile_id == "UNKNOWN_FALLBACK"

    def test_top_label_is_first_element_not_highest_score(self):
        verdict = classify(preds(("aluminum foil", 0.1), ("newspaper", 0.95)))

        assert verdict.raw_label == "aluminum foil"
        assert verdict.profile_id == "paper_default"

    @pytest.mark.parametrize("label,expected", [
        ("steel fork cutlery", "metal_default"),
        ("glass jar", "glass_default"),
        ("corrugated carton", "cardboard_default"),
        ("magazine", "paper_default"),
        ("yogurt tub", "rigid_plastic_default"),
    ])
    def test_category_to_profile(self, label, expected):
        assert classify(preds((label, 0.7))).profile_id == expected


class TestThreshold:
    """Tests for the minimum winning score and tie breaking."""

    def test_exactly_threshold_does_not_win(self):
        scores = score_predictions(preds(("water jug", 0.2)))

        assert scores[WasteCategory.RIGID_PLASTIC] == pytest.approx(0.3)
        assert select_category(scores) is None

    def test_bottle_at_threshold_falls_back_to_container(self):
        verdict = classify(preds(("bottle", 0.2)))

        assert verdict.profile_id == "rigid_plastic_default"
        assert verdict.decided_by == DecisionPath.FALLBACK_CONTAINER
        assert verdict.note == CONTAINER_FALLBACK_NOTE

    def test_just_above_threshold_wins(self):
        scores = score_predictions(preds(("water jug", 0.21)))

        assert select_category(scores) == WasteCategory.RIGID_PLASTIC

    def test_tie_goes_to_first_category(self):
        scores = score_predictions(preds(("bottle", 0.6)))

        assert scores[WasteCategory.RIGID_PLASTIC] == scores[WasteCategory.GLASS]
        assert select_category(scores) == WasteCategory.RIGID_PLASTIC

    def test_other_predictions_break_bottle_tie(self):
        verdict = classify(preds(("bottle", 0.6), ("glass", 0.3)))

        assert verdict.profile_id == "glass_default"

    def test_all_zero_scores_have_no_winner(self):
        assert select_category({category: 0.0 for category in WasteCategory}) is None


class TestFallbackHeuristics:
    """Tests for the no-winner fallback path."""

    def test_book_resolves_to_paper(self):
        verdict = classify(preds(("book jacket", 0.0)))

        assert verdict.profile_id == "paper_default"
        assert verdict.decided_by == DecisionPath.FALLBACK_PAPER
        assert verdict.note == PAPER_FALLBACK_NOTE

    def test_newspaper_resolves_to_paper(self):
        verdict = classify(preds(("newspaper", 0.0)))

        assert verdict.decided_by == DecisionPath.FALLBACK_PAPER

    def test_can_resolves_to_container(self):
        verdict = classify(preds(("toucan", 0.1)))

        assert verdict.profile_id == "rigid_plastic_default"
        assert verdict.decided_by == DecisionPath.FALLBACK_CONTAINER

    def test_no_match_is_unknown(self):
        verdict = classify(preds(("golden retriever", 0.97)))

        assert verdict.profile_id == "UNKNOWN_FALLBACK"
        assert verdict.raw_label == "golden retriever"
        assert verdict.decided_by == DecisionPath.UNKNOWN
        assert verdict.outcome == DisposalOutcome.GENERAL

    def test_fallback_note_does_not_touch_profile_table(self):
        classify(preds(("bottle", 0.0)))

        assert WASTE_MAP["rigid_plastic_default"].note != CONTAINER_FALLBACK_NOTE


class TestVerdict:
    """Tests for verdict derivation and serialization."""

    def test_classify_is_idempotent(self):
        predictions = preds(("plastic bottle", 0.6), ("glass", 0.2), ("tin", 0.1))

        assert classify(predictions) == classify(predictions)

    def test_to_dict_shape(self):
        data = classify(preds(("banana", 0.5))).to_dict()

        assert data == {
            "type": "Food Organics",
            "recyclable": False,
            "compostable": True,
            "special": False,
            "note": "Compostable/Green Bin waste.",
            "rawLabel": "banana",
        }

    def test_outcome_priority(self):
        assert classify(preds(("shattered", 0.5))).outcome == DisposalOutcome.SPECIAL
        assert classify(preds(("glass jar", 0.5))).outcome == DisposalOutcome.RECYCLABLE

    def test_badges(self):
        assert classify(preds(("glass jar", 0.5))).badge == "RECYCLE"
        assert classify(preds(("banana", 0.5))).badge == "COMPOST"
        assert classify(preds(("shattered", 0.5))).badge == "TRASH"

    def test_malformed_entries_never_raise(self):
        verdict = classify([{"label": None, "score": "high"}, {"score": 0.5}, {"label": "tin can"}])

        assert verdict.raw_label == ""
        assert verdict.profile_id == "UNKNOWN_FALLBACK"

    def test_score_too_large_for_float_counts_as_zero(self):
        verdict = classify([{"label": "tin can", "score": 10 ** 400}])

        assert verdict.raw_label == "tin can"
        assert verdict.profile_id == "rigid_plastic_default"
        assert verdict.decided_by == DecisionPath.FALLBACK_CONTAINER

    def test_generator_input(self):
        verdict = classify(p for p in preds(("banana peel", 0.8), ("plastic bag", 0.1)))

        assert verdict.profile_id == "organic_compost"
        assert verdict.raw_label == "banana peel"
