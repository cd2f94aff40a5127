"""Prediction confidence from sample size and spread."""

from __future__ import annotations

from typing import Sequence

from cyclecast.analytics.statistics import population_variance
from cyclecast.config import DEFAULT_CONFIG, EngineConfig
from cyclecast.history import CycleRecord

# Fixed confidence for short histories, keyed by cycle count
SMALL_SAMPLE_CONFIDENCE = {0: 0.0, 1: 0.3, 2: 0.5}
MODERATE_SAMPLE_CONFIDENCE = 0.7  # 3-5 cycles
FULL_SAMPLE_CYCLES = 6

CONSISTENCY_BASE = 0.6
CONSISTENCY_GAIN = 0.35
VARIANCE_SCALE = 100.0


def score_confidence(
    history: Sequence[CycleRecord],
    config: EngineConfig = DEFAULT_CONFIG,
) -> float:
    """Map a cleaned history to a confidence value in [0, ceiling].

    Below 6 cycles the score depends only on the count.  From 6 cycles on,
    ``0.6 + 0.35 * max(0, 1 - variance / 100)``, capped at
    ``config.confidence_ceiling``.
    """
    n = len(history)
    if n in SMALL_SAMPLE_CONFIDENCE:
        return SMALL_SAMPLE_CONFIDENCE[n]
    if n < FULL_SAMPLE_CYCLES:
        return MODERATE_SAMPLE_CONFIDENCE

    variance = population_variance([r.length for r in history])
    consistency = max(0.0, 1.0 - variance / VARIANCE_SCALE)
    confidence = min(config.confidence_ceiling, CONSISTENCY_BASE + consistency * CONSISTENCY_GAIN)
    return round(confidence, 2)
