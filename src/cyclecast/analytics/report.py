"""Consolidated cycle report.

Bundles the output of every analytics module into a single CycleReport
that is JSON-serializable and can be flattened for tabular export.
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any, Sequence

from cyclecast.analytics.health import CycleProfile, Insight, RiskAssessment
from cyclecast.analytics.patterns import PatternReport
from cyclecast.analytics.prediction import FertilityWindow, Prediction, Recommendation
from cyclecast.analytics.statistics import Statistics
from cyclecast.config import DEFAULT_CONFIG, EngineConfig
from cyclecast.history import CycleRecord, in_bounds

CSV_HEADERS = ["Date", "Cycle_Length", "Predicted_Length", "Health_Score", "Notes"]


def _jsonable(value: Any) -> Any:
    """Recursively convert dates to ISO strings."""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _flatten(value: Any, prefix: str, out: dict[str, Any]) -> None:
    # Empty containers still get a (None) column
    if isinstance(value, (dict, list)) and not value and prefix:
        out[prefix] = None
    elif isinstance(value, dict):
        for k, v in value.items():
            _flatten(v, f"{prefix}.{k}" if prefix else str(k), out)
    elif isinstance(value, list):
        for i, v in enumerate(value):
            _flatten(v, f"{prefix}.{i}", out)
    else:
        out[prefix] = value


@dataclass
class CycleReport:
    """Full analysis of one cycle history snapshot."""

    statistics: Statistics
    prediction: Prediction
    fertility_window: FertilityWindow
    confidence: float = 0.0
    recommendations: list[Recommendation] = field(default_factory=list)
    patterns: PatternReport = field(default_factory=lambda: PatternReport(insufficient_data=True))
    insights: list[Insight] = field(default_factory=list)
    risks: list[RiskAssessment] = field(default_factory=list)
    profile: CycleProfile | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly, dates as ISO strings)."""
        return _jsonable(asdict(self))

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def flatten(self) -> dict[str, Any]:
        """Dot-keyed scalar view of the report, e.g. ``statistics.average_length``."""
        out: dict[str, Any] = {}
        _flatten(self.to_dict(), "", out)
        return out

    def to_csv(
        self,
        history: Sequence[CycleRecord] = (),
        config: EngineConfig = DEFAULT_CONFIG,
    ) -> str:
        """Render the history plus the next-cycle forecast as CSV.

        One row per recorded cycle, followed by a ``predicted`` row for the
        next cycle.  Notes mark cycles left out of the forecast for being
        outside the configured length bounds (``excluded``) and outlier
        cycles (``outlier``).
        """
        outlier_dates = {o.date for o in self.patterns.outliers}
        score = self.profile.health_score if self.profile else ""

        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for rec in history:
            notes = []
            if not in_bounds(rec, config):
                notes.append("excluded")
            if rec.start in outlier_dates:
                notes.append("outlier")
            writer.writerow([rec.start.isoformat(), rec.length, "", score, ";".join(notes)])
        writer.writerow([
            self.prediction.next_cycle_start.isoformat(),
            "",
            self.prediction.next_cycle_length,
            score,
            "predicted",
        ])
        return buf.getvalue()

    def __repr__(self) -> str:
        return (
            f"CycleReport(n={self.statistics.total_cycles}, "
            f"next={self.prediction.next_cycle_start}, "
            f"confidence={self.confidence:.2f}, "
            f"risks={len(self.risks)})"
        )
