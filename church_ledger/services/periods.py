"""Reporting period: a calendar year, or one month of it."""

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Period:
    """Year, or year+month, used to filter records by date."""

    year: int
    month: Optional[int] = None

    def __post_init__(self):
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValueError(f"Month must be 1-12, got {self.month}")

    @property
    def start(self) -> date:
        return date(self.year, self.month or 1, 1)

    @property
    def end(self) -> date:
        """Last day of the period (inclusive)."""
        if self.month is None:
            return date(self.year, 12, 31)
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end

    @classmethod
    def from_query(cls, year: Optional[int], month: Optional[int] = None) -> Optional["Period"]:
        """Build a period from optional query parameters; no year means no filter."""
        if year is None:
            return None
        return cls(year=year, month=month)

    def __str__(self) -> str:
        if self.month is None:
            return str(self.year)
        return f"{self.year}-{self.month:02d}"


__all__ = ["Period"]
