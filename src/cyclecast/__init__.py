"""cyclecast: menstrual cycle statistics, forecasting and health heuristics."""

from cyclecast.analytics.pipeline import analyze_history
from cyclecast.config import DEFAULT_CONFIG, EngineConfig, Settings
from cyclecast.history import CycleRecord, add_days, clean_history, valid_records

__version__ = "0.1.0"

__all__ = [
    "analyze_history",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "Settings",
    "CycleRecord",
    "add_days",
    "clean_history",
    "valid_records",
]
