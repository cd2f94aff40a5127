"""Analytics engine for cycle statistics, forecasts and health heuristics.

Modules:
    statistics  -- Descriptive statistics over cycle lengths
    confidence  -- Prediction confidence from sample size and spread
    prediction  -- Next-cycle forecast, ovulation, fertile window
    patterns    -- Seasonal, trend, alternating and outlier detection
    health      -- Insights, risk flags and the cycle profile
    report      -- Consolidated report and export
    pipeline    -- End-to-end analysis of a history snapshot
"""

from cyclecast.analytics.statistics import (
    compute_statistics,
    population_variance,
    Statistics,
)
from cyclecast.analytics.confidence import score_confidence
from cyclecast.analytics.prediction import (
    predict_cycles,
    default_prediction,
    fertility_window,
    ovulation_dates,
    generate_recommendations,
    Prediction,
    FertilityWindow,
    Recommendation,
)
from cyclecast.analytics.patterns import detect_patterns, PatternReport
from cyclecast.analytics.health import (
    generate_insights,
    assess_risks,
    build_profile,
    Insight,
    RiskAssessment,
    CycleProfile,
)
from cyclecast.analytics.report import CycleReport
from cyclecast.analytics.pipeline import analyze_history

__all__ = [
    # statistics
    "compute_statistics",
    "population_variance",
    "Statistics",
    # confidence
    "score_confidence",
    # prediction
    "predict_cycles",
    "default_prediction",
    "fertility_window",
    "ovulation_dates",
    "generate_recommendations",
    "Prediction",
    "FertilityWindow",
    "Recommendation",
    # patterns
    "detect_patterns",
    "PatternReport",
    # health
    "generate_insights",
    "assess_risks",
    "build_profile",
    "Insight",
    "RiskAssessment",
    "CycleProfile",
    # report
    "CycleReport",
    # pipeline
    "analyze_history",
]
