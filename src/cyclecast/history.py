"""Cycle records and history assembly.

A history is a plain list of :class:`CycleRecord` sorted by start date.
It is built either from logged period start dates (each gap between two
consecutive starts is one cycle) or from a single anchor date plus a
configured cycle length, then cleaned before analysis.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Iterable, Mapping

from cyclecast.config import DEFAULT_CONFIG, EngineConfig

logger = logging.getLogger(__name__)

# Bounds applied to a manually configured cycle length
ANCHOR_LENGTH_MIN = 20
ANCHOR_LENGTH_MAX = 40


def add_days(day: date, n: float) -> date:
    """Shift *day* by *n* days.

    Fractional offsets are floored, so 28.6 days after the 1st lands on
    the 29th.
    """
    return day + timedelta(days=math.floor(n))


def parse_date(value: Any) -> date | None:
    """Parse a date, ISO string, or unpadded ``Y-M-D`` key.

    Returns None if the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip().strip('"').strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    # Calendar keys are written without zero padding, e.g. "2024-3-7"
    parts = text.split("-")
    if len(parts) != 3:
        return None
    try:
        y, m, d = (int(p) for p in parts)
        return date(y, m, d)
    except ValueError:
        return None


@dataclass(frozen=True)
class CycleRecord:
    """One observed cycle: its start date and length in days."""

    start: date
    length: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CycleRecord | None:
        """Build a record from ``{"start": ..., "length": ...}``.

        Returns None for records without a usable start or length.
        """
        if not isinstance(data, Mapping):
            return None
        start = parse_date(data.get("start"))
        try:
            length = int(data.get("length") or 0)
        except (TypeError, ValueError):
            return None
        if start is None or length <= 0:
            return None
        return cls(start=start, length=length)

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.isoformat(), "length": self.length}


def valid_records(
    records: Iterable[CycleRecord | Mapping[str, Any] | None],
) -> list[CycleRecord]:
    """Drop malformed records and sort the rest by start date.

    No length bounds are applied; this is the history the pattern and
    health rules look at.
    """
    valid: list[CycleRecord] = []
    for rec in records:
        if rec is not None and not isinstance(rec, CycleRecord):
            rec = CycleRecord.from_dict(rec)
        if rec is None or rec.start is None or not rec.length:
            logger.debug("Dropping malformed cycle record")
            continue
        valid.append(rec)
    valid.sort(key=lambda r: r.start)
    return valid


def in_bounds(rec: CycleRecord, config: EngineConfig = DEFAULT_CONFIG) -> bool:
    return config.min_cycle_length <= rec.length <= config.max_cycle_length


def clean_history(
    records: Iterable[CycleRecord | Mapping[str, Any] | None],
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[CycleRecord]:
    """Filter and sort a raw history.

    Drops records without a start or length, and records whose length is
    outside ``[config.min_cycle_length, config.max_cycle_length]``.  The
    input is left untouched; a new list sorted by start date is returned.
    """
    cleaned: list[CycleRecord] = []
    dropped = 0
    for rec in records:
        if rec is not None and not isinstance(rec, CycleRecord):
            rec = CycleRecord.from_dict(rec)
        if rec is None or rec.start is None or not rec.length:
            dropped += 1
            continue
        if not in_bounds(rec, config):
            logger.debug(
                "Dropping cycle starting %s: length %d outside [%d, %d]",
                rec.start, rec.length,
                config.min_cycle_length, config.max_cycle_length,
            )
            dropped += 1
            continue
        cleaned.append(rec)

    if dropped:
        logger.debug("Cleaned history: kept %d, dropped %d", len(cleaned), dropped)

    cleaned.sort(key=lambda r: r.start)
    return cleaned


# ---------------------------------------------------------------------------
# History assembly
# ---------------------------------------------------------------------------


def history_from_starts(starts: Iterable[date]) -> list[CycleRecord]:
    """Turn logged period start dates into cycle records.

    Duplicate dates are collapsed.  Each pair of consecutive starts gives
    one record whose length is the gap between them; the last logged start
    has no known length yet and produces no record.
    """
    days = sorted(set(starts))
    return [
        CycleRecord(start=prev, length=(curr - prev).days)
        for prev, curr in zip(days, days[1:])
    ]


def history_from_anchor(
    anchor: date,
    length: int | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[CycleRecord]:
    """Synthesize a one-record history from an anchor date.

    *length* defaults to ``config.default_cycle_length`` and is clamped to
    20-40 days.
    """
    if length is None:
        length = config.default_cycle_length
    length = max(ANCHOR_LENGTH_MIN, min(ANCHOR_LENGTH_MAX, int(length)))
    return [CycleRecord(start=anchor, length=length)]


# ---------------------------------------------------------------------------
# File loading
# ---------------------------------------------------------------------------


def load_start_dates(path: str | Path) -> list[date]:
    """Read logged period start dates from a file.

    ``.json`` files hold a list of date strings.  Anything else is read as
    one date per line; CSV quoting and a ``start_date`` header (the tracker
    export format) are accepted.  Lines that do not parse are skipped.
    """
    path = Path(path)
    starts: list[date] = []

    if path.suffix.lower() == ".json":
        with open(path) as f:
            try:
                entries = json.load(f)
            except json.JSONDecodeError:
                logger.warning("%s is not valid JSON, no dates loaded", path.name)
                return []
        if not isinstance(entries, list):
            logger.warning("%s does not hold a list of dates", path.name)
            return []
        for i, entry in enumerate(entries):
            day = parse_date(entry)
            if day is None:
                logger.warning("%s[%d]: unparseable date %r, skipping", path.name, i, entry)
                continue
            starts.append(day)
        return starts

    with open(path, newline="") as f:
        for line_num, row in enumerate(csv.reader(f), 1):
            if not row or not row[0].strip():
                continue
            cell = row[0].strip()
            if cell.lower() == "start_date":
                continue
            day = parse_date(cell)
            if day is None:
                logger.warning("%s line %d: unparseable date %r, skipping", path.name, line_num, cell)
                continue
            starts.append(day)

    return starts
