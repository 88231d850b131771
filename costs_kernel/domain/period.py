"""
MonthPeriod -- the calendar month a closing applies to.

Responsibility:
    Validates (year, month) and derives the half-open UTC range
    [first day of month, first day of next month) used by every time-entry
    query.  Entries are attributed to a month by their start_time.

Architecture position:
    Kernel > Domain -- pure value object, zero I/O.

Failure modes:
    - InvalidPeriodError if year is outside [2000, 2100] or month outside
      [1, 12].
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from costs_kernel.exceptions import InvalidPeriodError

MIN_YEAR = 2000
MAX_YEAR = 2100


@dataclass(frozen=True, order=True)
class MonthPeriod:
    """A validated calendar month."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not isinstance(self.year, int) or not MIN_YEAR <= self.year <= MAX_YEAR:
            raise InvalidPeriodError(
                self.year, self.month, f"year must be between {MIN_YEAR} and {MAX_YEAR}"
            )
        if not isinstance(self.month, int) or not 1 <= self.month <= 12:
            raise InvalidPeriodError(
                self.year, self.month, "month must be between 1 and 12"
            )

    @property
    def code(self) -> str:
        """Period code, e.g. '2024-03'."""
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def start(self) -> datetime:
        """Inclusive lower bound (UTC midnight on day 1)."""
        return datetime(self.year, self.month, 1, tzinfo=timezone.utc)

    @property
    def end(self) -> datetime:
        """Exclusive upper bound (UTC midnight on day 1 of next month)."""
        if self.month == 12:
            return datetime(self.year + 1, 1, 1, tzinfo=timezone.utc)
        return datetime(self.year, self.month + 1, 1, tzinfo=timezone.utc)

    def __str__(self) -> str:
        return self.code
