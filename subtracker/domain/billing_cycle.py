"""
Billing cycle arithmetic: deterministic, date only (no timezone).

Cycles:
- weekly: +7 days
- monthly: +1 calendar month, day clipped to the last day of the target month
- quarterly: +3 calendar months, same clipping
- yearly: +1 calendar year (Feb 29 -> Feb 28 in non-leap years)

Monthly equivalents are informational estimates: a weekly charge is
multiplied by the fixed constant WEEKS_PER_MONTH (4.33) instead of
averaging real calendar days, and the weekly total divides by the same
constant.
"""
import calendar
from datetime import date, timedelta
from decimal import Decimal

CYCLE_WEEKLY = "weekly"
CYCLE_MONTHLY = "monthly"
CYCLE_QUARTERLY = "quarterly"
CYCLE_YEARLY = "yearly"

BILLING_CYCLES = (CYCLE_WEEKLY, CYCLE_MONTHLY, CYCLE_QUARTERLY, CYCLE_YEARLY)

# ~365.25 / 12 / 7, truncated to two places
WEEKS_PER_MONTH = Decimal("4.33")


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: date, n: int) -> date:
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = min(d.day, last_day_of_month(year, month))
    return date(year, month, day)


def next_occurrence(d: date, cycle: str) -> date:
    """Billing date one cycle after `d`."""
    if cycle == CYCLE_WEEKLY:
        return d + timedelta(days=7)
    if cycle == CYCLE_MONTHLY:
        return add_months(d, 1)
    if cycle == CYCLE_QUARTERLY:
        return add_months(d, 3)
    if cycle == CYCLE_YEARLY:
        return add_months(d, 12)
    raise ValueError(f"invalid billing cycle: {cycle}")


def advance_to_future(d: date, cycle: str, today: date) -> date:
    """
    Roll `d` forward by whole cycles until it is on or after `today`.

    The result is always reachable from `d` by repeated next_occurrence().
    Weekly dates skip the whole weeks in one step; month-based cycles are
    stepped one at a time because day clipping depends on the path taken
    (Jan 31 -> Feb 28 -> Mar 28, not Mar 31).
    """
    if d >= today:
        return d
    if cycle == CYCLE_WEEKLY:
        weeks = -(-(today - d).days // 7)
        return d + timedelta(weeks=weeks)
    while d < today:
        d = next_occurrence(d, cycle)
    return d


def monthly_equivalent(amount: Decimal, cycle: str) -> Decimal:
    """Per-month cost of `amount` charged once per `cycle` (unrounded)."""
    amount = Decimal(amount)
    if cycle == CYCLE_WEEKLY:
        return amount * WEEKS_PER_MONTH
    if cycle == CYCLE_MONTHLY:
        return amount
    if cycle == CYCLE_QUARTERLY:
        return amount / 3
    if cycle == CYCLE_YEARLY:
        return amount / 12
    raise ValueError(f"invalid billing cycle: {cycle}")
