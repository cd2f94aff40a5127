"""Tests for cyclecast.analytics.health -- insights, risks, profile."""

import pytest

from cyclecast.analytics.health import (
    generate_insights,
    assess_risks,
    build_profile,
    regularity_tier,
    length_category,
    profile_data_quality,
    tracking_period_months,
    health_score,
    CycleProfile,
    SEVERE_PAIN,
)

from tests.conftest import make_history, make_monthly_history


class TestInsights:
    def test_empty_history(self):
        insights = generate_insights([])
        assert len(insights) == 1
        assert insights[0].category == "tracking"
        assert insights[0].severity == "info"

    def test_regular_history_no_insights(self, regular_history):
        assert generate_insights(regular_history) == []

    def test_very_short(self):
        insights = generate_insights(make_history([18] * 3))
        assert [i.title for i in insights] == ["Very Short Cycles"]
        assert insights[0].severity == "warning"

    def test_very_long(self):
        insights = generate_insights(make_history([40] * 3))
        assert [i.title for i in insights] == ["Very Long Cycles"]

    def test_insight_thresholds_exclusive(self):
        assert generate_insights(make_history([21] * 3)) == []
        assert generate_insights(make_history([38] * 3)) == []

    def test_irregular(self):
        # variance 100
        insights = generate_insights(make_history([20, 40] * 2))
        assert [i.category for i in insights] == ["regularity"]
        assert insights[0].severity == "caution"

    def test_severe_pain(self, regular_history):
        insights = generate_insights(regular_history, {SEVERE_PAIN})
        assert [i.category for i in insights] == ["symptoms"]

    def test_unknown_symptom_ignored(self, regular_history):
        assert generate_insights(regular_history, {"headache"}) == []


class TestRisks:
    def test_empty(self):
        assert assess_risks([]) == []

    def test_regular_no_risks(self, regular_history):
        assert assess_risks(regular_history) == []

    def test_long_cycles(self):
        risks = assess_risks(make_history([40] * 3))
        assert [r.condition for r in risks] == ["PCOS", "thyroid_dysfunction"]
        assert risks[0].risk_level == "moderate"
        assert risks[1].risk_level == "low_to_moderate"

    def test_short_cycles_thyroid_only(self):
        risks = assess_risks(make_history([22] * 3))
        assert [r.condition for r in risks] == ["thyroid_dysfunction"]

    def test_high_variance(self):
        risks = assess_risks(make_history([20, 40] * 2))
        assert [r.condition for r in risks] == ["PCOS", "hormonal_imbalance"]
        assert "high_variability" in risks[1].indicators

    def test_hormonal_only(self):
        # [21, 35] → variance 49: above 36, below 64
        risks = assess_risks(make_history([21, 35] * 3))
        assert [r.condition for r in risks] == ["hormonal_imbalance"]


class TestProfileTiers:
    def test_regularity(self):
        assert regularity_tier(0.0) == "very_regular"
        assert regularity_tier(4.0) == "regular"
        assert regularity_tier(9.0) == "somewhat_irregular"
        assert regularity_tier(25.0) == "irregular"

    def test_length_category(self):
        assert length_category(24.9) == "short"
        assert length_category(25.0) == "normal"
        assert length_category(32.0) == "normal"
        assert length_category(32.1) == "long"

    def test_data_quality(self):
        assert profile_data_quality(0) == "none"
        assert profile_data_quality(2) == "insufficient"
        assert profile_data_quality(5) == "limited"
        assert profile_data_quality(11) == "good"
        assert profile_data_quality(12) == "excellent"

    def test_tracking_period(self):
        history = make_monthly_history([28] * 13)  # Jan 2024 .. Jan 2025
        assert tracking_period_months(history) == 12
        assert tracking_period_months([]) == 0


class TestHealthScore:
    def test_perfect(self):
        assert health_score(28.0, 0.0, 3) == 100

    def test_capped_at_100(self):
        assert health_score(28.0, 0.0, 12) == 100

    def test_length_penalty(self):
        # |22 - 28.5| * 2 = 13
        assert health_score(22.0, 0.0, 3) == 87

    def test_variance_penalty_and_bonus(self):
        assert health_score(28.0, 4.0, 6) == 97

    def test_variance_penalty_capped(self):
        assert health_score(28.0, 100.0, 1) == 70

    def test_bounded(self):
        assert 0 <= health_score(60.0, 500.0, 0) <= 100

    def test_non_increasing_in_variance(self):
        scores = [health_score(28.5, v / 2, 6) for v in range(0, 100)]
        assert all(a >= b for a, b in zip(scores, scores[1:]))


class TestBuildProfile:
    def test_empty(self):
        assert build_profile([]) is None

    def test_regular(self, regular_history):
        profile = build_profile(regular_history)
        assert isinstance(profile, CycleProfile)
        assert profile.average_length == 28.0
        assert profile.regularity == "very_regular"
        assert profile.length_category == "normal"
        assert profile.total_cycles == 6
        assert profile.data_quality == "good"
        assert profile.health_score == 100

    def test_repr(self, regular_history):
        assert "very_regular" in repr(build_profile(regular_history))
