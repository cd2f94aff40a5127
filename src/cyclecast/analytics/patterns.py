"""Structural patterns across a cycle history.

Four detectors run over the full history:
  - seasonal    -- mean length per meteorological season of the start date
  - trend       -- last 6 cycles vs. everything before them
  - cyclical    -- alternating long/short cycles (even vs. odd positions)
  - outliers    -- cycles more than 2 standard deviations from the mean
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

import numpy as np
from scipy import stats as sps

from cyclecast.config import DEFAULT_CONFIG, EngineConfig
from cyclecast.history import CycleRecord

SEASONS = {
    "spring": (3, 4, 5),
    "summer": (6, 7, 8),
    "autumn": (9, 10, 11),
    "winter": (12, 1, 2),
}

RECENT_WINDOW = 6
TREND_STABLE_BAND = 1.0  # days
TREND_SIGNIFICANT = 2.0  # days
CYCLICAL_THRESHOLD = 2.0  # days


@dataclass
class TrendPattern:
    direction: str  # "lengthening", "shortening", "stable"
    magnitude: float  # |recent mean - earlier mean|, days
    significance: str  # "significant" or "minor"


@dataclass
class CyclicalPattern:
    detected: bool
    pattern: str  # "even_longer" or "odd_longer"
    difference: float  # days


@dataclass
class Outlier:
    date: date
    length: int
    deviation: float  # days from the mean


@dataclass
class PatternReport:
    """Patterns found in a history, or an insufficient-data marker."""

    insufficient_data: bool = False
    seasonal: dict[str, float] = field(default_factory=dict)
    trend: TrendPattern | None = None
    cyclical: CyclicalPattern | None = None
    outliers: list[Outlier] = field(default_factory=list)

    def __repr__(self) -> str:
        if self.insufficient_data:
            return "PatternReport(insufficient_data)"
        return (
            f"PatternReport(seasons={len(self.seasonal)}, "
            f"trend={self.trend.direction if self.trend else None}, "
            f"outliers={len(self.outliers)})"
        )


def _season(month: int) -> str:
    for name, months in SEASONS.items():
        if month in months:
            return name
    raise ValueError(f"invalid month: {month}")


def seasonal_averages(history: Sequence[CycleRecord]) -> dict[str, float]:
    """Mean cycle length per season; seasons without samples are omitted."""
    buckets: dict[str, list[int]] = {name: [] for name in SEASONS}
    for rec in history:
        buckets[_season(rec.start.month)].append(rec.length)
    return {
        name: round(float(np.mean(vals)), 2)
        for name, vals in buckets.items()
        if vals
    }


def detect_trend(history: Sequence[CycleRecord]) -> TrendPattern | None:
    """Compare the last 6 cycles with all earlier ones.

    Returns None when there are no earlier cycles.
    """
    recent = history[-RECENT_WINDOW:]
    older = history[:-RECENT_WINDOW]
    if not older:
        return None

    diff = (
        float(np.mean([r.length for r in recent]))
        - float(np.mean([r.length for r in older]))
    )
    if diff > TREND_STABLE_BAND:
        direction = "lengthening"
    elif diff < -TREND_STABLE_BAND:
        direction = "shortening"
    else:
        direction = "stable"

    return TrendPattern(
        direction=direction,
        magnitude=round(abs(diff), 2),
        significance="significant" if abs(diff) > TREND_SIGNIFICANT else "minor",
    )


def detect_cyclical(
    history: Sequence[CycleRecord],
    min_cycles: int = 8,
) -> CyclicalPattern | None:
    """Look for alternating cycle lengths (even vs. odd index)."""
    if len(history) < min_cycles:
        return None

    lengths = np.asarray([r.length for r in history], dtype=np.float64)
    even_avg = float(np.mean(lengths[0::2]))
    odd_avg = float(np.mean(lengths[1::2]))
    diff = abs(even_avg - odd_avg)

    return CyclicalPattern(
        detected=diff > CYCLICAL_THRESHOLD,
        pattern="even_longer" if even_avg > odd_avg else "odd_longer",
        difference=round(diff, 2),
    )


def detect_outliers(
    history: Sequence[CycleRecord],
    z_threshold: float = 2.0,
) -> list[Outlier]:
    """Cycles whose population z-score exceeds *z_threshold* in magnitude.

    A history with zero spread has no outliers.
    """
    if len(history) == 0:
        return []
    lengths = np.asarray([r.length for r in history], dtype=np.float64)
    if float(np.std(lengths, ddof=0)) == 0.0:
        return []

    mean = float(np.mean(lengths))
    z = sps.zscore(lengths, ddof=0)
    return [
        Outlier(date=rec.start, length=rec.length, deviation=round(rec.length - mean, 2))
        for rec, score in zip(history, z)
        if abs(score) > z_threshold
    ]


def detect_patterns(
    history: Sequence[CycleRecord],
    config: EngineConfig = DEFAULT_CONFIG,
) -> PatternReport:
    """Run every pattern detector over *history*.

    Needs at least ``config.pattern_min_cycles`` cycles; otherwise returns a
    report flagged ``insufficient_data``.
    """
    if len(history) < config.pattern_min_cycles:
        return PatternReport(insufficient_data=True)

    return PatternReport(
        seasonal=seasonal_averages(history),
        trend=detect_trend(history),
        cyclical=detect_cyclical(history, config.cyclical_min_cycles),
        outliers=detect_outliers(history, config.outlier_z),
    )
