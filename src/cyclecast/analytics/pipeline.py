"""Analytics pipeline: run every analysis over one history snapshot.

Takes a raw list of cycle records, cleans it, and produces a
:class:`CycleReport`.  Each call is a full, stateless recomputation.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Collection, Iterable, Mapping

from cyclecast.analytics.confidence import score_confidence
from cyclecast.analytics.health import assess_risks, build_profile, generate_insights
from cyclecast.analytics.patterns import detect_patterns
from cyclecast.analytics.prediction import (
    default_prediction,
    generate_recommendations,
    predict_cycles,
)
from cyclecast.analytics.report import CycleReport
from cyclecast.analytics.statistics import compute_statistics
from cyclecast.config import DEFAULT_CONFIG, EngineConfig, Settings
from cyclecast.history import CycleRecord, clean_history, valid_records

logger = logging.getLogger(__name__)


def analyze_history(
    records: Iterable[CycleRecord | Mapping[str, Any]],
    settings: Settings | Mapping[str, Any] | None = None,
    symptoms: Collection[str] | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
    today: date | None = None,
    current_cycle_start: date | None = None,
) -> CycleReport:
    """Run the full analytics pipeline on a cycle history.

    Args:
        records: Cycle records (or ``{"start", "length"}`` mappings) in any
            order.  Lengths outside the configured bounds are left out of
            statistics, confidence and the forecast; patterns, insights,
            risks and the profile see every well-formed record.
        settings: :class:`Settings` or a mapping accepted by
            :meth:`Settings.from_dict`.
        symptoms: Symptom flags, e.g. ``{"severe_pain"}``.
        config: Engine thresholds.
        today: Anchor for the no-history forecast (default: today).
        current_cycle_start: Start of the cycle in progress (the latest
            logged start, whose length is not known yet).  Forecasts run
            from it when it is later than the last record.

    Returns:
        A populated CycleReport.
    """
    if not isinstance(settings, Settings):
        settings = Settings.from_dict(settings)

    # Patterns and health rules see every well-formed cycle, long or short
    observed = valid_records(records)
    history = clean_history(observed, config)
    stats = compute_statistics(history, config)

    if history:
        prediction, window = predict_cycles(
            history, stats, settings, config, current_start=current_cycle_start,
        )
    else:
        logger.info("No usable cycle history, falling back to default forecast")
        anchor = current_cycle_start or today or date.today()
        prediction, window = default_prediction(anchor, settings, config)

    return CycleReport(
        statistics=stats,
        prediction=prediction,
        fertility_window=window,
        confidence=score_confidence(history, config),
        recommendations=generate_recommendations(stats),
        patterns=detect_patterns(observed, config),
        insights=generate_insights(observed, symptoms),
        risks=assess_risks(observed),
        profile=build_profile(observed),
    )
