"""Health insights, coarse risk flags, and the cycle profile.

Insights and risk flags use two separate threshold tables
(``INSIGHT_THRESHOLDS`` and ``RISK_THRESHOLDS`` in :mod:`cyclecast.config`).
None of this is a diagnosis; the output is meant to prompt a conversation
with a healthcare provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, Sequence

import numpy as np

from cyclecast.analytics.statistics import population_variance
from cyclecast.config import INSIGHT_THRESHOLDS, RISK_THRESHOLDS
from cyclecast.history import CycleRecord

SEVERE_PAIN = "severe_pain"

DAYS_PER_MONTH = 30.44


@dataclass
class Insight:
    category: str  # "tracking", "cycle_length", "regularity", "symptoms"
    severity: str  # "info", "caution", "warning"
    title: str
    message: str
    recommendation: str | None = None


@dataclass
class RiskAssessment:
    condition: str
    risk_level: str
    indicators: list[str] = field(default_factory=list)
    recommendation: str = ""


@dataclass
class CycleProfile:
    """Overall picture of a tracked history."""

    average_length: float
    regularity: str  # very_regular / regular / somewhat_irregular / irregular
    length_category: str  # short / normal / long
    total_cycles: int
    tracking_period_months: int
    data_quality: str  # none / insufficient / limited / good / excellent
    health_score: int  # 0-100

    def __repr__(self) -> str:
        return (
            f"CycleProfile(avg={self.average_length:.1f}d, "
            f"{self.regularity}, {self.length_category}, "
            f"score={self.health_score})"
        )


def _length_stats(history: Sequence[CycleRecord]) -> tuple[float, float]:
    lengths = [r.length for r in history]
    return float(np.mean(lengths)), population_variance(lengths)


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


def generate_insights(
    history: Sequence[CycleRecord],
    symptoms: Collection[str] | None = None,
) -> list[Insight]:
    """Human-readable health insights for a history and symptom flags."""
    if len(history) == 0:
        return [Insight(
            category="tracking",
            severity="info",
            title="Start Your Journey",
            message="Begin tracking to unlock personalized health insights.",
        )]

    symptoms = symptoms or ()
    avg, variance = _length_stats(history)
    insights: list[Insight] = []

    if avg < INSIGHT_THRESHOLDS["very_short"]:
        insights.append(Insight(
            category="cycle_length",
            severity="warning",
            title="Very Short Cycles",
            message="Cycles under 21 days may indicate hormonal imbalances.",
            recommendation="Consider consulting a healthcare provider.",
        ))
    elif avg > INSIGHT_THRESHOLDS["very_long"]:
        insights.append(Insight(
            category="cycle_length",
            severity="warning",
            title="Very Long Cycles",
            message="Cycles over 38 days may need medical evaluation.",
            recommendation="Track symptoms and consult a healthcare provider.",
        ))

    if variance > INSIGHT_THRESHOLDS["irregular_variance"]:
        insights.append(Insight(
            category="regularity",
            severity="caution",
            title="Irregular Cycles",
            message="High variation in cycle length detected.",
            recommendation="Track lifestyle factors that might influence cycles.",
        ))

    if SEVERE_PAIN in symptoms:
        insights.append(Insight(
            category="symptoms",
            severity="warning",
            title="Severe Pain",
            message="Severe menstrual pain may indicate underlying conditions.",
            recommendation="Discuss pain management with your doctor.",
        ))

    return insights


# ---------------------------------------------------------------------------
# Risk flags
# ---------------------------------------------------------------------------


def assess_risks(history: Sequence[CycleRecord]) -> list[RiskAssessment]:
    """Coarse, non-exclusive risk flags from cycle length and variability."""
    if len(history) == 0:
        return []

    avg, variance = _length_stats(history)
    t = RISK_THRESHOLDS
    risks: list[RiskAssessment] = []

    if avg > t["pcos_length"] or variance > t["pcos_variance"]:
        risks.append(RiskAssessment(
            condition="PCOS",
            risk_level="moderate",
            indicators=["long_cycles", "irregular_cycles"],
            recommendation="Consider PCOS screening with healthcare provider",
        ))

    if avg < t["thyroid_short"] or avg > t["thyroid_long"]:
        risks.append(RiskAssessment(
            condition="thyroid_dysfunction",
            risk_level="low_to_moderate",
            indicators=["cycle_length_extremes"],
            recommendation="Thyroid function tests may be beneficial",
        ))

    if variance > t["hormonal_variance"]:
        risks.append(RiskAssessment(
            condition="hormonal_imbalance",
            risk_level="moderate",
            indicators=["high_variability"],
            recommendation="Track lifestyle factors and consider hormone evaluation",
        ))

    return risks


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

# Upper variance bound (exclusive) for each regularity tier
REGULARITY_TIERS = [
    (4.0, "very_regular"),
    (9.0, "regular"),
    (25.0, "somewhat_irregular"),
]

IDEAL_LENGTH = 28.5
VARIANCE_PENALTY_MAX = 30.0
LENGTH_PENALTY_MAX = 20.0


def regularity_tier(variance: float) -> str:
    for upper, label in REGULARITY_TIERS:
        if variance < upper:
            return label
    return "irregular"


def length_category(avg_length: float) -> str:
    if avg_length < RISK_THRESHOLDS["short"]:
        return "short"
    if avg_length <= RISK_THRESHOLDS["normal_upper"]:
        return "normal"
    return "long"


def profile_data_quality(n_cycles: int) -> str:
    if n_cycles == 0:
        return "none"
    if n_cycles < 3:
        return "insufficient"
    if n_cycles < 6:
        return "limited"
    if n_cycles < 12:
        return "good"
    return "excellent"


def tracking_period_months(history: Sequence[CycleRecord]) -> int:
    """Months between the first and last recorded start."""
    if len(history) == 0:
        return 0
    days = (history[-1].start - history[0].start).days
    return int(np.floor(days / DAYS_PER_MONTH + 0.5))


def health_score(avg_length: float, variance: float, n_cycles: int) -> int:
    """0-100 score: penalties for variability and atypical length,
    small bonuses for long tracking histories.
    """
    score = 100.0
    score -= min(VARIANCE_PENALTY_MAX, variance * 2)

    if avg_length < RISK_THRESHOLDS["short"] or avg_length > RISK_THRESHOLDS["normal_upper"]:
        score -= min(LENGTH_PENALTY_MAX, abs(avg_length - IDEAL_LENGTH) * 2)

    if n_cycles >= 6:
        score += 5
    if n_cycles >= 12:
        score += 5

    return int(max(0, min(100, np.floor(score + 0.5))))


def build_profile(history: Sequence[CycleRecord]) -> CycleProfile | None:
    """Summarize a history into a :class:`CycleProfile` (None if empty)."""
    if len(history) == 0:
        return None

    avg, variance = _length_stats(history)
    return CycleProfile(
        average_length=round(avg, 1),
        regularity=regularity_tier(variance),
        length_category=length_category(avg),
        total_cycles=len(history),
        tracking_period_months=tracking_period_months(history),
        data_quality=profile_data_quality(len(history)),
        health_score=health_score(avg, variance, len(history)),
    )
