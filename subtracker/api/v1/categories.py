"""
Category API endpoints (read-only reference data)
"""
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from subtracker.api.deps import get_db
from subtracker.api.v1.subscriptions import SubscriptionResponse
from subtracker.application.aggregation import category_summary
from subtracker.application.categories import list_categories, get_category
from subtracker.application.subscriptions import list_by_category


router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    icon: str
    color: str


class CategoryDetailResponse(CategoryResponse):
    subscriptions: list[SubscriptionResponse]
    monthly: dict[str, Decimal]
    yearly: dict[str, Decimal]


@router.get("/", response_model=list[CategoryResponse])
def list_all(db: Session = Depends(get_db)):
    return list_categories(db)


@router.get("/{category_id}", response_model=CategoryDetailResponse)
def get_one(category_id: str, db: Session = Depends(get_db)):
    """Category with its subscriptions and active spend per currency"""
    category = get_category(db, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail=f"Category not found: {category_id}")

    summary = category_summary(list_by_category(db, category_id), category_id)
    return CategoryDetailResponse(
        id=category.id,
        name=category.name,
        icon=category.icon,
        color=category.color,
        subscriptions=[SubscriptionResponse.model_validate(s) for s in summary.subscriptions],
        monthly=summary.monthly,
        yearly=summary.yearly,
    )
