"""Shared fixtures and helpers for the cyclecast test suite."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

import pytest

from cyclecast.history import CycleRecord


# ---------------------------------------------------------------------------
# History-building helpers
# ---------------------------------------------------------------------------


def make_history(
    lengths: Sequence[int],
    first_start: date = date(2024, 1, 1),
) -> list[CycleRecord]:
    """Build a contiguous history: each cycle starts when the previous ends."""
    records = []
    start = first_start
    for length in lengths:
        records.append(CycleRecord(start=start, length=length))
        start = start + timedelta(days=length)
    return records


def make_monthly_history(
    lengths: Sequence[int],
    year: int = 2024,
    first_month: int = 1,
) -> list[CycleRecord]:
    """Build a history with one cycle starting on the 1st of each month."""
    records = []
    for i, length in enumerate(lengths):
        month = (first_month - 1 + i) % 12 + 1
        y = year + (first_month - 1 + i) // 12
        records.append(CycleRecord(start=date(y, month, 1), length=length))
    return records


@pytest.fixture
def regular_history() -> list[CycleRecord]:
    """Six 28-day cycles."""
    return make_history([28] * 6)


@pytest.fixture
def three_cycles() -> list[CycleRecord]:
    """Lengths [28, 30, 26]: mean 28, variance 8/3."""
    return make_history([28, 30, 26])
