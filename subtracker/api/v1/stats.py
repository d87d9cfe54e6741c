"""
Spending statistics API endpoints (read-only)
"""
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from subtracker.api.deps import get_db
from subtracker.api.v1.subscriptions import SubscriptionResponse
from subtracker.application import aggregation
from subtracker.application.subscriptions import list_subscriptions, list_active_subscriptions
from subtracker.utils.clock import today_local


router = APIRouter(prefix="/api/v1/stats", tags=["stats"])


class TotalsResponse(BaseModel):
    monthly: dict[str, Decimal]
    yearly: dict[str, Decimal]
    weekly: dict[str, Decimal]


class MonthSpendResponse(BaseModel):
    currency: str
    total: Decimal
    subscriptions: list[SubscriptionResponse]


class ActualSpendResponse(BaseModel):
    year: int
    month: int
    by_currency: list[MonthSpendResponse]


class CategorySpendResponse(BaseModel):
    category_id: str
    currency: str
    monthly_equivalent_sum: Decimal
    count: int


class SummaryResponse(BaseModel):
    active_count: int
    inactive_count: int
    most_expensive: SubscriptionResponse | None
    cheapest: SubscriptionResponse | None
    avg_monthly_by_currency: dict[str, Decimal]


class UpcomingResponse(BaseModel):
    overdue: list[SubscriptionResponse]
    today: list[SubscriptionResponse]
    tomorrow: list[SubscriptionResponse]
    this_week: list[SubscriptionResponse]
    next_week: list[SubscriptionResponse]
    later: list[SubscriptionResponse]


def _sub(sub) -> SubscriptionResponse | None:
    return SubscriptionResponse.model_validate(sub) if sub is not None else None


@router.get("/totals", response_model=TotalsResponse)
def totals(db: Session = Depends(get_db)):
    """Smoothed monthly / yearly / weekly spend per currency"""
    subs = list_active_subscriptions(db)
    return TotalsResponse(
        monthly=aggregation.monthly_total(subs),
        yearly=aggregation.yearly_total(subs),
        weekly=aggregation.weekly_total(subs),
    )


@router.get("/actual-spend", response_model=ActualSpendResponse)
def actual_spend(
    year: int | None = Query(None, ge=1970, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    """Raw amounts actually billed in a calendar month (default: current month)"""
    today = today_local()
    year = year or today.year
    month = month or today.month
    spend = aggregation.actual_spend_for_month(list_active_subscriptions(db), year, month)
    return ActualSpendResponse(
        year=year,
        month=month,
        by_currency=[
            MonthSpendResponse(
                currency=s.currency,
                total=s.total,
                subscriptions=[_sub(x) for x in s.subscriptions],
            )
            for s in spend.values()
        ],
    )


@router.get("/by-category", response_model=list[CategorySpendResponse])
def by_category(db: Session = Depends(get_db)):
    return [
        CategorySpendResponse(**row.__dict__)
        for row in aggregation.spend_by_category(list_active_subscriptions(db))
    ]


@router.get("/summary", response_model=SummaryResponse)
def summary(db: Session = Depends(get_db)):
    s = aggregation.stats(list_subscriptions(db))
    return SummaryResponse(
        active_count=s.active_count,
        inactive_count=s.inactive_count,
        most_expensive=_sub(s.most_expensive),
        cheapest=_sub(s.cheapest),
        avg_monthly_by_currency=s.avg_monthly_by_currency,
    )


@router.get("/upcoming", response_model=UpcomingResponse)
def upcoming(db: Session = Depends(get_db)):
    """Active subscriptions bucketed by how soon they bill"""
    groups = aggregation.upcoming_grouped(list_active_subscriptions(db))
    return UpcomingResponse(**{
        name: [_sub(x) for x in getattr(groups, name)]
        for name in ("overdue", "today", "tomorrow", "this_week", "next_week", "later")
    })
