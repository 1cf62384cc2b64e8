"""In-game calendar dates as reported by the admin port."""

import datetime
from dataclasses import dataclass

# The proleptic Gregorian calendar repeats every 400 years, and year 0 is a
# leap year like 2000.
YEARS_PER_CYCLE = 400
DAYS_PER_CYCLE = 146097

# Start of a 400-year cycle that datetime can represent. Years 0-399 of any
# cycle are resolved as years 2000-2399.
_CYCLE_START = datetime.date(2000, 1, 1)


@dataclass(frozen=True, order=True)
class GameDate:
    """
    A calendar date counted from year 0, January 1.

    datetime.date only covers years 1 to 9999, so dates are folded into a
    single 400-year cycle before conversion. Any non-negative day count maps
    to a date.
    """
    year: int
    month: int
    day: int

    @classmethod
    def from_days(cls, days: int) -> 'GameDate':
        """Convert a day count since year 0, January 1 to a calendar date."""
        if days < 0:
            raise ValueError(f"Day count must not be negative: {days}")
        cycles, days_in_cycle = divmod(days, DAYS_PER_CYCLE)
        date = _CYCLE_START + datetime.timedelta(days=days_in_cycle)
        year = cycles * YEARS_PER_CYCLE + date.year - _CYCLE_START.year
        return cls(year, date.month, date.day)

    def to_days(self) -> int:
        """Inverse of from_days."""
        cycles, year_in_cycle = divmod(self.year, YEARS_PER_CYCLE)
        date = datetime.date(_CYCLE_START.year + year_in_cycle, self.month, self.day)
        return cycles * DAYS_PER_CYCLE + (date - _CYCLE_START).days

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
