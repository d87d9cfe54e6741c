"""
Spending aggregation: pure functions over a snapshot of subscriptions.

Nothing here touches the database: callers pass the current list (usually
list_subscriptions(db)) and get plain values back. Inactive subscriptions
are ignored everywhere except the active/inactive counts in stats().

Currencies are never merged or converted; every total is keyed by currency
code. Totals are rounded half-up to cents, and the yearly and weekly totals
derive from the already-rounded monthly total so the three never drift
apart.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from subtracker.domain.billing_cycle import WEEKS_PER_MONTH, last_day_of_month, monthly_equivalent
from subtracker.infrastructure.db.models import SubscriptionModel
from subtracker.utils.clock import today_local
from subtracker.utils.money import round_money


def _active(subscriptions: Iterable[SubscriptionModel]) -> list[SubscriptionModel]:
    return [s for s in subscriptions if s.is_active]


def _monthly(sub: SubscriptionModel) -> Decimal:
    return monthly_equivalent(sub.amount, sub.billing_cycle)


# ============================================================================
# Totals
# ============================================================================


def monthly_total(subscriptions: Iterable[SubscriptionModel]) -> dict[str, Decimal]:
    """Monthly-equivalent spend per currency, in order of first appearance."""
    totals: dict[str, Decimal] = {}
    for sub in _active(subscriptions):
        totals[sub.currency] = totals.get(sub.currency, Decimal("0")) + _monthly(sub)
    return {currency: round_money(total) for currency, total in totals.items()}


def yearly_total(subscriptions: Iterable[SubscriptionModel]) -> dict[str, Decimal]:
    return {c: round_money(total * 12) for c, total in monthly_total(subscriptions).items()}


def weekly_total(subscriptions: Iterable[SubscriptionModel]) -> dict[str, Decimal]:
    return {c: round_money(total / WEEKS_PER_MONTH) for c, total in monthly_total(subscriptions).items()}


@dataclass
class MonthSpend:
    currency: str
    total: Decimal = Decimal("0")
    subscriptions: list[SubscriptionModel] = field(default_factory=list)


def actual_spend_for_month(
    subscriptions: Iterable[SubscriptionModel],
    year: int | None = None,
    month: int | None = None,
    today: date | None = None,
) -> dict[str, MonthSpend]:
    """
    What will really be charged in a calendar month.

    Sums the raw amounts of active subscriptions whose next billing date
    falls inside [first day, last day] of the month (default: the current
    month). Unlike monthly_total() nothing is smoothed across cycles.
    """
    if year is None or month is None:
        today = today or today_local()
        year = year if year is not None else today.year
        month = month if month is not None else today.month
    month_start = date(year, month, 1)
    month_end = date(year, month, last_day_of_month(year, month))

    out: dict[str, MonthSpend] = {}
    for sub in _active(subscriptions):
        if not (month_start <= sub.next_billing_date <= month_end):
            continue
        bucket = out.setdefault(sub.currency, MonthSpend(currency=sub.currency))
        bucket.total += Decimal(sub.amount)
        bucket.subscriptions.append(sub)
    for bucket in out.values():
        bucket.total = round_money(bucket.total)
    return out


# ============================================================================
# Breakdowns
# ============================================================================


@dataclass
class CategorySpend:
    category_id: str
    currency: str
    monthly_equivalent_sum: Decimal
    count: int


def spend_by_category(subscriptions: Iterable[SubscriptionModel]) -> list[CategorySpend]:
    """Active spend grouped by (category, currency), largest monthly sum first."""
    sums: dict[tuple[str, str], Decimal] = defaultdict(lambda: Decimal("0"))
    counts: dict[tuple[str, str], int] = defaultdict(int)
    for sub in _active(subscriptions):
        key = (sub.category_id, sub.currency)
        sums[key] += _monthly(sub)
        counts[key] += 1

    rows = [
        CategorySpend(
            category_id=category_id,
            currency=currency,
            monthly_equivalent_sum=round_money(total),
            count=counts[(category_id, currency)],
        )
        for (category_id, currency), total in sums.items()
    ]
    rows.sort(key=lambda r: (-r.monthly_equivalent_sum, r.category_id, r.currency))
    return rows


@dataclass
class CategorySummary:
    category_id: str
    subscriptions: list[SubscriptionModel]
    monthly: dict[str, Decimal]
    yearly: dict[str, Decimal]


def category_summary(subscriptions: Iterable[SubscriptionModel], category_id: str) -> CategorySummary:
    """A category's subscriptions (active and paused) plus its active spend per currency."""
    in_category = [s for s in subscriptions if s.category_id == category_id]
    return CategorySummary(
        category_id=category_id,
        subscriptions=in_category,
        monthly=monthly_total(in_category),
        yearly=yearly_total(in_category),
    )


@dataclass
class SpendingStats:
    active_count: int
    inactive_count: int
    most_expensive: SubscriptionModel | None
    cheapest: SubscriptionModel | None
    avg_monthly_by_currency: dict[str, Decimal]


def stats(subscriptions: Iterable[SubscriptionModel]) -> SpendingStats:
    """
    Counts, extremes and averages.

    Extremes rank active subscriptions by monthly equivalent (numbers only,
    currencies are not converted); with one active subscription it is both
    the most expensive and the cheapest.
    """
    subscriptions = list(subscriptions)
    active = _active(subscriptions)
    ranked = sorted(active, key=_monthly, reverse=True)

    per_currency_count: dict[str, int] = defaultdict(int)
    for sub in active:
        per_currency_count[sub.currency] += 1
    averages = {
        currency: round_money(total / per_currency_count[currency])
        for currency, total in monthly_total(active).items()
    }

    return SpendingStats(
        active_count=len(active),
        inactive_count=len(subscriptions) - len(active),
        most_expensive=ranked[0] if ranked else None,
        cheapest=ranked[-1] if ranked else None,
        avg_monthly_by_currency=averages,
    )


# ============================================================================
# Upcoming bills
# ============================================================================


@dataclass
class UpcomingBills:
    overdue: list[SubscriptionModel] = field(default_factory=list)
    today: list[SubscriptionModel] = field(default_factory=list)
    tomorrow: list[SubscriptionModel] = field(default_factory=list)
    this_week: list[SubscriptionModel] = field(default_factory=list)
    next_week: list[SubscriptionModel] = field(default_factory=list)
    later: list[SubscriptionModel] = field(default_factory=list)


def days_until(billing_date: date, today: date) -> int:
    return (billing_date - today).days


def upcoming_grouped(subscriptions: Iterable[SubscriptionModel], today: date | None = None) -> UpcomingBills:
    """
    Bucket active subscriptions by days until billing:
    <0 overdue, 0 today, 1 tomorrow, 2..7 this week, 8..14 next week, >14 later.
    Each bucket keeps the order of the input list.
    """
    if today is None:
        today = today_local()
    groups = UpcomingBills()
    for sub in _active(subscriptions):
        diff = days_until(sub.next_billing_date, today)
        if diff < 0:
            groups.overdue.append(sub)
        elif diff == 0:
            groups.today.append(sub)
        elif diff == 1:
            groups.tomorrow.append(sub)
        elif diff <= 7:
            groups.this_week.append(sub)
        elif diff <= 14:
            groups.next_week.append(sub)
        else:
            groups.later.append(sub)
    return groups
