"""
Tests for billing cycle arithmetic
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from subtracker.domain.billing_cycle import (
    BILLING_CYCLES, CYCLE_WEEKLY, CYCLE_MONTHLY, CYCLE_QUARTERLY, CYCLE_YEARLY,
    add_months, advance_to_future, monthly_equivalent, next_occurrence,
)


class TestNextOccurrence:
    def test_weekly_adds_seven_days(self):
        assert next_occurrence(date(2025, 12, 29), CYCLE_WEEKLY) == date(2026, 1, 5)

    def test_monthly_same_day(self):
        assert next_occurrence(date(2025, 1, 15), CYCLE_MONTHLY) == date(2025, 2, 15)

    def test_monthly_clips_to_february_non_leap(self):
        assert next_occurrence(date(2025, 1, 31), CYCLE_MONTHLY) == date(2025, 2, 28)

    def test_monthly_clips_to_february_leap(self):
        assert next_occurrence(date(2024, 1, 31), CYCLE_MONTHLY) == date(2024, 2, 29)

    def test_monthly_december_rolls_year(self):
        assert next_occurrence(date(2025, 12, 31), CYCLE_MONTHLY) == date(2026, 1, 31)

    def test_quarterly_clips(self):
        assert next_occurrence(date(2025, 1, 31), CYCLE_QUARTERLY) == date(2025, 4, 30)

    def test_quarterly_crosses_year(self):
        assert next_occurrence(date(2025, 11, 30), CYCLE_QUARTERLY) == date(2026, 2, 28)

    def test_yearly_leap_day_clips(self):
        assert next_occurrence(date(2024, 2, 29), CYCLE_YEARLY) == date(2025, 2, 28)

    def test_yearly_plain(self):
        assert next_occurrence(date(2025, 6, 1), CYCLE_YEARLY) == date(2026, 6, 1)

    def test_unknown_cycle_rejected(self):
        with pytest.raises(ValueError):
            next_occurrence(date(2025, 1, 1), "daily")


def test_add_months_negative():
    assert add_months(date(2025, 3, 31), -1) == date(2025, 2, 28)


class TestAdvanceToFuture:
    TODAY = date(2025, 3, 10)

    def test_today_is_kept(self):
        assert advance_to_future(self.TODAY, CYCLE_MONTHLY, self.TODAY) == self.TODAY

    def test_future_is_kept(self):
        d = date(2025, 5, 1)
        assert advance_to_future(d, CYCLE_WEEKLY, self.TODAY) == d

    def test_monthly_past(self):
        assert advance_to_future(date(2025, 1, 15), CYCLE_MONTHLY, self.TODAY) == date(2025, 3, 15)

    def test_weekly_lands_on_today(self):
        assert advance_to_future(date(2025, 3, 3), CYCLE_WEEKLY, self.TODAY) == self.TODAY

    def test_weekly_one_day_past(self):
        assert advance_to_future(date(2025, 3, 9), CYCLE_WEEKLY, self.TODAY) == date(2025, 3, 16)

    def test_month_end_follows_clipped_path(self):
        # Jan 31 -> Feb 28 -> Mar 28, each step from the previous result
        assert advance_to_future(date(2025, 1, 31), CYCLE_MONTHLY, self.TODAY) == date(2025, 3, 28)

    def test_weekly_fifty_years_back(self):
        start = date(1975, 3, 12)
        result = advance_to_future(start, CYCLE_WEEKLY, self.TODAY)
        assert self.TODAY <= result < self.TODAY + timedelta(days=7)
        assert (result - start).days % 7 == 0

    def test_monthly_fifty_years_back(self):
        result = advance_to_future(date(1975, 3, 20), CYCLE_MONTHLY, self.TODAY)
        assert result == date(2025, 3, 20)

    @pytest.mark.parametrize("cycle", BILLING_CYCLES)
    @pytest.mark.parametrize("start", [
        date(2020, 2, 29), date(2024, 1, 31), date(2024, 8, 31), date(2025, 3, 9), date(2023, 11, 30),
    ])
    def test_result_reachable_by_repeated_steps(self, cycle, start):
        result = advance_to_future(start, cycle, self.TODAY)
        assert result >= self.TODAY

        d = start
        while d < result:
            d = next_occurrence(d, cycle)
        assert d == result


class TestMonthlyEquivalent:
    def test_weekly_uses_fixed_constant(self):
        assert monthly_equivalent(Decimal("10"), CYCLE_WEEKLY) == Decimal("43.30")

    def test_monthly_unchanged(self):
        assert monthly_equivalent(Decimal("9.99"), CYCLE_MONTHLY) == Decimal("9.99")

    def test_quarterly_divides_by_three(self):
        assert monthly_equivalent(Decimal("30"), CYCLE_QUARTERLY) == Decimal("10")

    def test_yearly_divides_by_twelve(self):
        assert monthly_equivalent(Decimal("120"), CYCLE_YEARLY) == Decimal("10")
