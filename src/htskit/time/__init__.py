"""Period parsing and indexing.

Period strings come in five frequencies, each with a canonical form:

    annual      "2024"
    quarterly   "2024 Q1"
    monthly     "2024 M01"
    weekly      "2024 W05"   (ISO week)
    daily       "2024-01-05"

A dataset must use a single frequency. Periods are ordered by an integer
ordinal that is only comparable within one frequency.
"""

from __future__ import annotations

import re
from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from functools import total_ordering
from typing import Any

import numpy as np
import pandas as pd

from htskit.core.errors import TimeParseError


class Frequency(str, Enum):
    """Time granularity of a dataset."""

    ANNUAL = "annual"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"


_ANNUAL_RE = re.compile(r"^(\d{4})$")
_QUARTERLY_RE = re.compile(r"^(\d{4}) Q(\d)$")
_MONTHLY_RE = re.compile(r"^(\d{4}) M(\d{1,2})$")
_WEEKLY_RE = re.compile(r"^(\d{4}) W(\d{1,2})$")
_DAILY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@total_ordering
@dataclass(frozen=True)
class TimePeriod:
    """A single period at a fixed frequency.

    ``ordinal`` counts periods from an arbitrary epoch: years for annual,
    ``year * 4 + quarter - 1`` for quarterly, ``year * 12 + month - 1`` for
    monthly, ISO weeks since 0001-01-01 for weekly and ``date.toordinal()``
    for daily.
    """

    frequency: Frequency
    ordinal: int

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TimePeriod):
            return NotImplemented
        if other.frequency != self.frequency:
            raise TypeError(
                f"Cannot compare {self.frequency.value} period with {other.frequency.value} period"
            )
        return self.ordinal < other.ordinal

    def __str__(self) -> str:
        return self.label

    @property
    def label(self) -> str:
        """Canonical string form."""
        freq = self.frequency
        if freq is Frequency.ANNUAL:
            return f"{self.ordinal:04d}"
        if freq is Frequency.QUARTERLY:
            year, quarter = divmod(self.ordinal, 4)
            return f"{year:04d} Q{quarter + 1}"
        if freq is Frequency.MONTHLY:
            year, month = divmod(self.ordinal, 12)
            return f"{year:04d} M{month + 1:02d}"
        if freq is Frequency.WEEKLY:
            iso = self.start_date.isocalendar()
            return f"{iso[0]:04d} W{iso[1]:02d}"
        return self.start_date.isoformat()

    @property
    def start_date(self) -> date:
        """First calendar day of the period."""
        freq = self.frequency
        if freq is Frequency.ANNUAL:
            return date(self.ordinal, 1, 1)
        if freq is Frequency.QUARTERLY:
            year, quarter = divmod(self.ordinal, 4)
            return date(year, quarter * 3 + 1, 1)
        if freq is Frequency.MONTHLY:
            year, month = divmod(self.ordinal, 12)
            return date(year, month + 1, 1)
        if freq is Frequency.WEEKLY:
            # Ordinal 1 (0001-01-01) is a Monday.
            return date.fromordinal(self.ordinal * 7 + 1)
        return date.fromordinal(self.ordinal)

    @property
    def start_time(self) -> pd.Timestamp:
        """Start of the period as a pandas Timestamp."""
        return pd.Timestamp(self.start_date)


def parse_period(value: Any) -> TimePeriod:
    """Parse one raw period value.

    Args:
        value: Period string, integer year, or date/datetime/Timestamp

    Returns:
        Parsed TimePeriod

    Raises:
        TimeParseError: If the value matches none of the supported formats
    """
    if isinstance(value, datetime):
        # Daily is the finest frequency; intraday stamps would collapse silently
        if value.time() != datetime.min.time() or getattr(value, "nanosecond", 0):
            raise TimeParseError(
                f"Timestamp '{value}' has a time of day; only whole days are supported",
                context={"value": str(value)},
                fix_hint="Aggregate intraday rows to days first, e.g. with dt.floor('D')",
            )
        value = value.date()
    if isinstance(value, date):
        return TimePeriod(Frequency.DAILY, value.toordinal())
    if isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_)):
        value = str(int(value))
    if not isinstance(value, str):
        raise TimeParseError(
            f"Unsupported period value of type {type(value).__name__}",
            context={"value": repr(value)},
        )

    text = value.strip()

    match = _ANNUAL_RE.match(text)
    if match:
        return TimePeriod(Frequency.ANNUAL, int(match.group(1)))

    match = _QUARTERLY_RE.match(text)
    if match:
        year, quarter = int(match.group(1)), int(match.group(2))
        if not 1 <= quarter <= 4:
            raise TimeParseError(f"Quarter out of range in '{value}'", context={"value": value})
        return TimePeriod(Frequency.QUARTERLY, year * 4 + quarter - 1)

    match = _MONTHLY_RE.match(text)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12:
            raise TimeParseError(f"Month out of range in '{value}'", context={"value": value})
        return TimePeriod(Frequency.MONTHLY, year * 12 + month - 1)

    match = _WEEKLY_RE.match(text)
    if match:
        year, week = int(match.group(1)), int(match.group(2))
        try:
            monday = date.fromisocalendar(year, week, 1)
        except ValueError as e:
            raise TimeParseError(
                f"Invalid ISO week in '{value}'",
                context={"value": value, "error": str(e)},
            ) from e
        return TimePeriod(Frequency.WEEKLY, (monday.toordinal() - 1) // 7)

    match = _DAILY_RE.match(text)
    if match:
        try:
            day = date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        except ValueError as e:
            raise TimeParseError(
                f"Invalid calendar date '{value}'",
                context={"value": value, "error": str(e)},
            ) from e
        return TimePeriod(Frequency.DAILY, day.toordinal())

    raise TimeParseError(f"Unrecognized period '{value}'", context={"value": value})


@dataclass(frozen=True)
class TimeIndex:
    """Distinct sorted periods of a dataset plus each row's position among them.

    Attributes:
        frequency: Frequency shared by every period
        periods: Sorted distinct periods
        positions: For each input row, the index of its period in ``periods``
    """

    frequency: Frequency
    periods: tuple[TimePeriod, ...]
    positions: np.ndarray

    @classmethod
    def from_values(cls, values: Iterable[Any]) -> TimeIndex:
        """Parse a column of raw period values.

        Raises:
            TimeParseError: On malformed values, mixed frequencies or no values
        """
        cache: dict[Any, TimePeriod] = {}
        parsed: list[TimePeriod] = []
        frequency: Frequency | None = None
        first_value: Any = None

        for row, raw in enumerate(values):
            key = raw.strip() if isinstance(raw, str) else raw
            period = cache.get(key) if isinstance(key, Hashable) else None
            if period is None:
                try:
                    period = parse_period(raw)
                except TimeParseError as e:
                    e.context.setdefault("row", row)
                    raise
                if isinstance(key, Hashable):
                    cache[key] = period

            if frequency is None:
                frequency, first_value = period.frequency, raw
            elif period.frequency is not frequency:
                raise TimeParseError(
                    "Mixed period frequencies in one dataset",
                    context={
                        "expected": frequency.value,
                        "found": period.frequency.value,
                        "first_value": first_value,
                        "value": raw,
                        "row": row,
                    },
                )
            parsed.append(period)

        if frequency is None:
            raise TimeParseError("No period values to index")

        periods = tuple(sorted(set(parsed)))
        lookup = {period: i for i, period in enumerate(periods)}
        positions = np.fromiter((lookup[p] for p in parsed), dtype=np.int64, count=len(parsed))
        return cls(frequency=frequency, periods=periods, positions=positions)

    def __len__(self) -> int:
        return len(self.periods)

    @property
    def labels(self) -> list[str]:
        """Canonical labels of the sorted periods."""
        return [p.label for p in self.periods]


__all__ = [
    "Frequency",
    "TimePeriod",
    "TimeIndex",
    "parse_period",
]
