"""Tests for scoring module."""

import math

import pytest

from llmvisibility.core.models import CompanyProfile, ScoringBreakdown, ScoringWeights
from llmvisibility.core.scoring import (
    DEFAULT_SCORING_WEIGHTS,
    calculate_visibility_score,
    heuristic_score,
    load_weights_file,
    normalize_breakdown,
    normalize_weights,
    parse_weights,
)

ZERO_WEIGHTS = ScoringWeights(0, 0, 0, 0, 0, 0)


def _breakdown(**factors):
    values = dict(mention_presence=1.0, mention_context=1.0, mention_position=1.0,
                  description_detail=1.0, answer_relevance=1.0, service_match=1.0)
    values.update(factors)
    return ScoringBreakdown(**values)


class TestNormalizeBreakdown:
    """Test breakdown clamping and coercion."""

    def test_clamps_and_coerces(self):
        breakdown = normalize_breakdown({
            "mentionPresence": 1.5,
            "mentionCount": 3,
            "mentionContext": "0.8",
            "mentionPosition": -2,
            "descriptionDetail": "high",
            "answerRelevance": None,
            "serviceMatch": float("nan"),
            "rationale": "Named as second option.",
        })
        assert breakdown.mention_presence == 1.0
        assert breakdown.mention_count == 3
        assert breakdown.mention_context == 0.8
        assert breakdown.mention_position == 0.0
        assert breakdown.description_detail == 0.0
        assert breakdown.answer_relevance == 0.0
        assert breakdown.service_match == 0.0
        assert breakdown.rationale == "Named as second option."

    def test_mention_count_not_clamped(self):
        assert normalize_breakdown({"mentionCount": 7}).mention_count == 7
        assert normalize_breakdown({"mentionCount": float("inf")}).mention_count == 0
        assert normalize_breakdown({"mentionCount": "4"}).mention_count == 0

    def test_non_string_rationale_dropped(self):
        assert normalize_breakdown({"rationale": ["a", "b"]}).rationale == ""

    def test_snake_case_keys(self):
        breakdown = normalize_breakdown({"mention_presence": 0.5, "service_match": 0.25})
        assert breakdown.mention_presence == 0.5
        assert breakdown.service_match == 0.25

    def test_idempotent(self):
        once = normalize_breakdown({"mentionPresence": 2, "mentionCount": 2,
                                    "mentionContext": "0.3", "rationale": 5})
        assert normalize_breakdown(once) == once

    def test_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            normalize_breakdown([1, 2, 3])


class TestCalculateVisibilityScore:
    """Test weighted score calculation."""

    def test_full_marks(self):
        assert calculate_visibility_score(_breakdown()) == pytest.approx(1.0)

    def test_not_mentioned_cap(self):
        assert calculate_visibility_score(_breakdown(mention_presence=0.0)) == 0.2

    @pytest.mark.parametrize("weights", [
        ScoringWeights(1, 1, 1, 1, 1, 1),
        ScoringWeights(0, 0, 0, 0, 0, 5),
        ScoringWeights(10, 0, 3, 0, 0.5, 2),
    ])
    def test_not_mentioned_never_above_cap(self, weights):
        assert calculate_visibility_score(_breakdown(mention_presence=0.0), weights) <= 0.2

    def test_zero_weights_use_defaults(self):
        breakdown = _breakdown(mention_presence=0.6, mention_context=0.2, mention_position=0.9,
                               description_detail=0.4, answer_relevance=0.7, service_match=0.1)
        assert calculate_visibility_score(breakdown, ZERO_WEIGHTS) == \
            calculate_visibility_score(breakdown, DEFAULT_SCORING_WEIGHTS)
        assert normalize_weights(ZERO_WEIGHTS) == normalize_weights(DEFAULT_SCORING_WEIGHTS)

    def test_weighted_sum(self):
        breakdown = _breakdown(mention_presence=1.0, mention_context=0.5, mention_position=0.0,
                               description_detail=0.5, answer_relevance=1.0, service_match=0.0)
        expected = 0.20 * 1.0 + 0.25 * 0.5 + 0.20 * 0.5 + 0.10 * 1.0
        assert calculate_visibility_score(breakdown) == pytest.approx(expected)

    def test_weights_are_normalized(self):
        doubled = ScoringWeights(0.4, 0.5, 0.3, 0.4, 0.2, 0.2)
        breakdown = _breakdown(mention_context=0.3, service_match=0.6)
        assert calculate_visibility_score(breakdown, doubled) == \
            pytest.approx(calculate_visibility_score(breakdown))
        assert sum(vars(normalize_weights(doubled)).values()) == pytest.approx(1.0)

    @pytest.mark.parametrize("value", [0.0, 0.3, 1.0])
    def test_result_in_unit_interval(self, value):
        weights = ScoringWeights(3, 1, 4, 1, 5, 9)
        score = calculate_visibility_score(_breakdown(mention_context=value, answer_relevance=value), weights)
        assert 0.0 <= score <= 1.0

    def test_non_finite_input_yields_zero(self):
        assert calculate_visibility_score(_breakdown(mention_context=float("nan"))) == 0.0
        assert calculate_visibility_score(_breakdown(mention_presence=float("inf"))) == 0.0

    def test_negative_weight_ignored(self):
        weights = ScoringWeights(-1, 1, 0, 0, 0, 0)
        breakdown = _breakdown(mention_context=0.4)
        assert calculate_visibility_score(breakdown, weights) == pytest.approx(0.4)


class TestHeuristicScore:
    """Substring heuristic."""

    company = CompanyProfile(name="Acme Cloud", description="", services=["backup", "Disaster Recovery"])

    def test_company_and_service(self):
        score, rationale = heuristic_score(
            self.company, "You could consider Acme Cloud or Rival Inc for backup.")
        assert score == 0.9
        assert rationale == "Company was mentioned; service was recognized."

    def test_company_only(self):
        assert heuristic_score(self.company, "ACME CLOUD is great.")[0] == 0.7

    def test_service_only(self):
        score, rationale = heuristic_score(self.company, "Many vendors offer disaster recovery.")
        assert score == 0.4
        assert rationale == "Company was not mentioned; service was recognized."

    def test_neither(self):
        assert heuristic_score(self.company, "I don't know.")[0] == 0.1


class TestWeightOverrides:
    """Parsing weight overrides from JSON and YAML."""

    def test_parse_json(self):
        weights = parse_weights('{"mentionPresence": 1, "serviceMatch": 0.5}')
        assert weights.mention_presence == 1.0
        assert weights.service_match == 0.5
        assert weights.mention_context == DEFAULT_SCORING_WEIGHTS.mention_context

    @pytest.mark.parametrize("value", ["not json", "[1, 2]", '{"mentionPresence": "a"}',
                                       '{"mentionContext": -1}'])
    def test_malformed_override(self, value):
        assert parse_weights(value) is None

    def test_empty_override(self):
        assert parse_weights("") is None
        assert parse_weights(None) is None

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("weights:\n  mentionPresence: 0.5\n  mentionContext: 0.5\n", encoding="utf-8")
        weights = load_weights_file(str(path))
        assert weights.mention_presence == 0.5
        assert math.isclose(weights.answer_relevance, 0.10)

    def test_missing_yaml_file(self, tmp_path):
        assert load_weights_file(str(tmp_path / "missing.yaml")) is None
        assert load_weights_file(None) is None
