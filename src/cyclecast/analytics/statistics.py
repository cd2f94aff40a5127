"""Descriptive statistics over a cleaned cycle history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from cyclecast.config import DEFAULT_CONFIG, EngineConfig
from cyclecast.history import CycleRecord


@dataclass
class Statistics:
    """Summary statistics of cycle lengths."""

    average_length: float
    standard_deviation: float = 0.0
    irregularity_score: float = 0.0  # coefficient of variation, %
    total_cycles: int = 0
    shortest: int = 0
    longest: int = 0
    trend: float = 0.0  # second-half mean minus first-half mean (days)
    data_quality: str = "insufficient"

    def __repr__(self) -> str:
        return (
            f"Statistics(avg={self.average_length:.2f}d, "
            f"sd={self.standard_deviation:.2f}d, "
            f"n={self.total_cycles}, quality={self.data_quality})"
        )


def population_variance(values: Sequence[float]) -> float:
    """Population variance (ddof=0).  Returns 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.var(np.asarray(values, dtype=np.float64), ddof=0))


def _lengths(history: Sequence[CycleRecord]) -> np.ndarray:
    return np.asarray([r.length for r in history], dtype=np.float64)


def split_half_trend(history: Sequence[CycleRecord]) -> float:
    """Mean length of the second half minus the first half.

    The split is at ``n // 2``; fewer than 4 cycles gives 0.
    """
    if len(history) < 4:
        return 0.0
    lengths = _lengths(history)
    mid = len(lengths) // 2
    return float(np.mean(lengths[mid:]) - np.mean(lengths[:mid]))


def data_quality_tier(n_cycles: int) -> str:
    if n_cycles == 0:
        return "insufficient"
    if n_cycles < 3:
        return "limited"
    if n_cycles < 6:
        return "moderate"
    return "good"


def compute_statistics(
    history: Sequence[CycleRecord],
    config: EngineConfig = DEFAULT_CONFIG,
) -> Statistics:
    """Reduce a cleaned history to summary statistics.

    An empty history yields the default cycle length and zeroes elsewhere.
    """
    if len(history) == 0:
        return Statistics(average_length=float(config.default_cycle_length))

    lengths = _lengths(history)
    mean = round(float(np.mean(lengths)), 2)
    std = round(float(np.sqrt(population_variance(lengths))), 2)

    # Coefficient of variation from the reported (rounded) mean and spread
    return Statistics(
        average_length=mean,
        standard_deviation=std,
        irregularity_score=round(std / mean * 100.0, 2),
        total_cycles=len(lengths),
        shortest=int(np.min(lengths)),
        longest=int(np.max(lengths)),
        trend=round(split_half_trend(history), 2),
        data_quality=data_quality_tier(len(lengths)),
    )
