"""Next-cycle forecasting and fertile window estimation.

The next start is the last known start plus the average cycle length (or,
with advanced estimation, a weighted blend of the last three lengths).
The next cycle's length is the average nudged by the least-squares slope
of the most recent cycles.

Ovulation is placed ``luteal_length`` days before the end of the cycle,
and the fertile window spans the 5 days before ovulation through the day
after it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

import numpy as np
from scipy import stats as sps

from cyclecast.analytics.statistics import Statistics
from cyclecast.config import DEFAULT_CONFIG, EngineConfig, Settings
from cyclecast.history import CycleRecord, add_days

logger = logging.getLogger(__name__)

FOLLOWING_CYCLES = 3
FERTILITY_FLOOR = 0.2
FERTILITY_PEAK = 0.5  # peak position as a fraction of the window


@dataclass
class CycleForecast:
    """A forecast cycle start and its assumed length."""

    start_date: date
    estimated_length: float


@dataclass
class Prediction:
    """Forecast for the next cycle and the few after it."""

    next_cycle_start: date
    next_cycle_length: int
    next_cycle_end: date
    following_cycles: list[CycleForecast] = field(default_factory=list)
    ovulation_date: date | None = None
    luteal_phase_start: date | None = None

    def __repr__(self) -> str:
        return (
            f"Prediction(next={self.next_cycle_start}, "
            f"length={self.next_cycle_length}d, "
            f"ovulation={self.ovulation_date})"
        )


@dataclass
class FertileDay:
    date: date
    score: float  # relative fertility, 0.2-1.0


@dataclass
class FertilityWindow:
    """The 7-day fertile window around the estimated ovulation date."""

    ovulation_date: date
    window_start: date
    window_end: date
    days: list[FertileDay] = field(default_factory=list)

    def __repr__(self) -> str:
        return (
            f"FertilityWindow({self.window_start}..{self.window_end}, "
            f"ovulation={self.ovulation_date})"
        )


@dataclass
class Recommendation:
    type: str  # "health" or "data"
    priority: str  # "high", "medium"
    message: str


START_TRACKING = Recommendation(
    type="data",
    priority="high",
    message="Start tracking your cycles for personalized predictions.",
)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _luteal(settings: Settings, config: EngineConfig) -> int:
    return settings.luteal_length or config.default_luteal_length


# ---------------------------------------------------------------------------
# Ovulation and luteal phase
# ---------------------------------------------------------------------------


def ovulation_dates(
    cycle_start: date,
    estimated_length: float,
    luteal_length: int,
) -> tuple[date, date]:
    """Return ``(ovulation_date, luteal_phase_start)`` for a cycle.

    Ovulation falls on cycle day ``estimated_length - luteal_length``
    (day 1 is *cycle_start*); the luteal phase starts the day after.
    """
    ovulation_day = estimated_length - luteal_length
    ovulation = add_days(cycle_start, ovulation_day - 1)
    luteal_start = add_days(cycle_start, estimated_length - luteal_length)
    return ovulation, luteal_start


def fertility_score(day_offset: float, total_days: float) -> float:
    """Triangular fertility curve peaking mid-window, floored at 0.2."""
    if total_days <= 0:
        return 1.0
    peak = total_days * FERTILITY_PEAK
    return max(FERTILITY_FLOOR, 1.0 - abs(day_offset - peak) / total_days)


def fertility_window(
    cycle_start: date,
    estimated_length: float,
    luteal_length: int,
    config: EngineConfig = DEFAULT_CONFIG,
) -> FertilityWindow:
    """Build the fertile window for a cycle starting on *cycle_start*."""
    ovulation, _ = ovulation_dates(cycle_start, estimated_length, luteal_length)
    start = add_days(ovulation, -config.fertile_days_before)
    end = add_days(ovulation, config.fertile_days_after)

    total = (end - start).days
    days = [
        FertileDay(
            date=add_days(start, offset),
            score=round(fertility_score(offset, total), 2),
        )
        for offset in range(total + 1)
    ]
    return FertilityWindow(
        ovulation_date=ovulation,
        window_start=start,
        window_end=end,
        days=days,
    )


# ---------------------------------------------------------------------------
# Next cycle
# ---------------------------------------------------------------------------


def weighted_recent_length(
    history: Sequence[CycleRecord],
    weights: Sequence[float],
) -> float:
    """Blend the last ``len(weights)`` cycle lengths.

    Weights are applied in chronological order, so the first weight goes
    to the oldest cycle of the window.
    """
    recent = history[-len(weights):]
    return round(float(sum(r.length * w for r, w in zip(recent, weights))), 2)


def predict_next_start(
    history: Sequence[CycleRecord],
    stats: Statistics,
    settings: Settings,
    config: EngineConfig = DEFAULT_CONFIG,
    current_start: date | None = None,
) -> date:
    """Forecast the next cycle start from the last known start.

    *current_start* is the start of a cycle still in progress (logged but
    without a known length yet); it is used when later than the last record.
    """
    predicted_length = stats.average_length
    n_weights = len(config.advanced_weights)
    if settings.advanced_estimation and len(history) >= n_weights:
        predicted_length = weighted_recent_length(history, config.advanced_weights)
        logger.debug("Weighted estimate %.2f days (average %.2f)",
                     predicted_length, stats.average_length)
    last_start = history[-1].start
    if current_start is not None and current_start > last_start:
        last_start = current_start
    return add_days(last_start, predicted_length)


def recent_trend(history: Sequence[CycleRecord]) -> float:
    """Least-squares slope of length vs. index (days per cycle).

    Returns 0 for fewer than 3 cycles.
    """
    if len(history) < 3:
        return 0.0
    x = np.arange(len(history), dtype=np.float64)
    y = np.asarray([r.length for r in history], dtype=np.float64)
    slope = float(sps.linregress(x, y).slope)
    return slope if math.isfinite(slope) else 0.0


def predict_cycle_length(
    history: Sequence[CycleRecord],
    stats: Statistics,
    config: EngineConfig = DEFAULT_CONFIG,
) -> int:
    """Average length adjusted by the recent trend, in whole days."""
    trend = recent_trend(history[-config.recent_trend_window:])
    adjusted = _round_half_up(stats.average_length + trend)
    return max(config.min_cycle_length, min(config.max_cycle_length, adjusted))


def predict_following_cycles(
    next_start: date,
    stats: Statistics,
    count: int = FOLLOWING_CYCLES,
) -> list[CycleForecast]:
    """Roll the average length forward *count* times from *next_start*."""
    # Whole offset from next_start, floored once
    return [
        CycleForecast(
            start_date=add_days(next_start, stats.average_length * step),
            estimated_length=stats.average_length,
        )
        for step in range(1, count + 1)
    ]


def predict_cycles(
    history: Sequence[CycleRecord],
    stats: Statistics,
    settings: Settings | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
    current_start: date | None = None,
) -> tuple[Prediction, FertilityWindow]:
    """Forecast the next cycle and its fertile window.

    Args:
        history: Cleaned, non-empty history.
        stats: Statistics computed from *history*.
        settings: Luteal length and weighted estimation toggle.
        config: Engine thresholds.
        current_start: Start of the cycle in progress, if logged.

    Returns:
        ``(prediction, fertility_window)``.
    """
    settings = settings or Settings()
    luteal = _luteal(settings, config)

    next_start = predict_next_start(history, stats, settings, config, current_start)
    length = predict_cycle_length(history, stats, config)
    ovulation, luteal_start = ovulation_dates(next_start, length, luteal)

    prediction = Prediction(
        next_cycle_start=next_start,
        next_cycle_length=length,
        next_cycle_end=add_days(next_start, stats.average_length),
        following_cycles=predict_following_cycles(next_start, stats),
        ovulation_date=ovulation,
        luteal_phase_start=luteal_start,
    )
    return prediction, fertility_window(next_start, length, luteal, config)


def default_prediction(
    today: date,
    settings: Settings | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> tuple[Prediction, FertilityWindow]:
    """Forecast for an empty history, treating *today* as a cycle start.

    Ovulation and the fertile window belong to the cycle starting today;
    the next start is one default cycle later.
    """
    settings = settings or Settings()
    luteal = _luteal(settings, config)
    length = config.default_cycle_length

    ovulation, luteal_start = ovulation_dates(today, length, luteal)
    prediction = Prediction(
        next_cycle_start=add_days(today, length),
        next_cycle_length=length,
        next_cycle_end=add_days(today, 2 * length),
        ovulation_date=ovulation,
        luteal_phase_start=luteal_start,
    )
    return prediction, fertility_window(today, length, luteal, config)


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------

IRREGULARITY_LIMIT = 20.0  # %
MIN_CYCLES_FOR_ACCURACY = 3
TYPICAL_RANGE = (25, 32)


def generate_recommendations(stats: Statistics) -> list[Recommendation]:
    """Tracking and health suggestions derived from the statistics."""
    if stats.total_cycles == 0:
        return [START_TRACKING]

    recs: list[Recommendation] = []
    if stats.irregularity_score > IRREGULARITY_LIMIT:
        recs.append(Recommendation(
            type="health",
            priority="high",
            message="High cycle irregularity detected. Consider consulting a healthcare provider.",
        ))
    if stats.total_cycles < MIN_CYCLES_FOR_ACCURACY:
        recs.append(Recommendation(
            type="data",
            priority="medium",
            message="Track more cycles for improved prediction accuracy.",
        ))
    lo, hi = TYPICAL_RANGE
    if stats.average_length < lo or stats.average_length > hi:
        recs.append(Recommendation(
            type="health",
            priority="medium",
            message="Cycle length outside typical range. Monitor closely.",
        ))
    return recs
