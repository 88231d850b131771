"""Tests for MonthPeriod validation and date range."""

from datetime import datetime, timezone

import pytest

from costs_kernel.domain.period import MonthPeriod
from costs_kernel.exceptions import InvalidPeriodError


class TestMonthPeriod:
    def test_code_is_zero_padded(self):
        assert MonthPeriod(2024, 3).code == "2024-03"
        assert str(MonthPeriod(2024, 11)) == "2024-11"

    def test_range_is_half_open_utc(self):
        period = MonthPeriod(2024, 2)
        assert period.start == datetime(2024, 2, 1, tzinfo=timezone.utc)
        assert period.end == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_december_rolls_into_next_year(self):
        period = MonthPeriod(2024, 12)
        assert period.end == datetime(2025, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "year, month",
        [(1999, 5), (2101, 1), (2024, 0), (2024, 13)],
    )
    def test_out_of_range_rejected(self, year, month):
        with pytest.raises(InvalidPeriodError) as exc_info:
            MonthPeriod(year, month)
        assert exc_info.value.code == "INVALID_PERIOD"

    def test_bounds_accepted(self):
        assert MonthPeriod(2000, 1).code == "2000-01"
        assert MonthPeriod(2100, 12).code == "2100-12"

    def test_ordering(self):
        assert MonthPeriod(2024, 1) < MonthPeriod(2024, 2) < MonthPeriod(2025, 1)
