"""Engine configuration and per-request settings.

``EngineConfig`` holds the fixed thresholds of the engine.  It is frozen so a
single instance can be shared between callers; pass a modified copy
(``dataclasses.replace``) to experiment with other bounds.

``Settings`` carries the user-facing options that change a single analysis
(luteal length, weighted estimation).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class EngineConfig:
    """Thresholds shared by every analytics module."""

    min_cycle_length: int = 21
    max_cycle_length: int = 35
    default_cycle_length: int = 28
    default_luteal_length: int = 14
    confidence_ceiling: float = 0.95
    # Applied oldest -> newest over the three most recent cycles
    advanced_weights: tuple[float, float, float] = (0.5, 0.3, 0.2)
    recent_trend_window: int = 6
    pattern_min_cycles: int = 6
    cyclical_min_cycles: int = 8
    outlier_z: float = 2.0
    fertile_days_before: int = 5
    fertile_days_after: int = 1


DEFAULT_CONFIG = EngineConfig()


# ---------------------------------------------------------------------------
# Health threshold tables
# ---------------------------------------------------------------------------

# Used by the insight generator (user-facing health messaging)
INSIGHT_THRESHOLDS = {
    "very_short": 21,
    "very_long": 38,
    "irregular_variance": 49,  # stddev > 7 days
}

# Used by the risk flags and the cycle profile
RISK_THRESHOLDS = {
    "pcos_length": 35,
    "pcos_variance": 64,
    "thyroid_short": 24,
    "thyroid_long": 38,
    "hormonal_variance": 36,
    "short": 25,
    "normal_upper": 32,
}


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

LUTEAL_MIN = 8
LUTEAL_MAX = 18


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class Settings:
    """Options for one analysis request."""

    luteal_length: int = 14
    advanced_estimation: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Settings":
        """Build settings from a loosely-typed mapping.

        Accepts ``lutealLength`` / ``advancedEstimation`` as well as the
        snake_case names.  Luteal length is clamped to 8-18 days; anything
        that does not parse falls back to the default.
        """
        if not data:
            return cls()

        raw_luteal = data.get("luteal_length", data.get("lutealLength"))
        try:
            luteal = int(raw_luteal) if raw_luteal is not None else cls.luteal_length
        except (TypeError, ValueError):
            luteal = cls.luteal_length
        luteal = max(LUTEAL_MIN, min(LUTEAL_MAX, luteal))

        raw_adv = data.get("advanced_estimation", data.get("advancedEstimation", False))
        return cls(luteal_length=luteal, advanced_estimation=_as_bool(raw_adv))
