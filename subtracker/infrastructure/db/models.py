"""
SQLAlchemy ORM models (row-store schema)
"""
from decimal import Decimal
from datetime import date as date_type, datetime
from sqlalchemy import (
    String, Text, TIMESTAMP, Date, Boolean, Numeric, JSON, Integer, func,
    CheckConstraint, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column

from subtracker.infrastructure.db.session import Base


class SubscriptionModel(Base):
    """A recurring charge tracked by the user"""
    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="USD")
    billing_cycle: Mapped[str] = mapped_column(String(16), nullable=False)  # weekly/monthly/quarterly/yearly

    next_billing_date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    start_date: Mapped[date_type] = mapped_column(Date, nullable=False)

    category_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False, default="other", server_default="other", index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    # Ordered lists: days-before offsets and the scheduler handles produced for them
    reminder_days: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    notification_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_subscriptions_amount_positive"),
        CheckConstraint(
            "billing_cycle IN ('weekly', 'monthly', 'quarterly', 'yearly')",
            name="ck_subscriptions_billing_cycle",
        ),
    )

    def __repr__(self) -> str:
        return f"<Subscription {self.id} {self.name!r} {self.amount} {self.currency} {self.billing_cycle}>"


class CategoryModel(Base):
    """Reference data: subscription categories (seeded, read-only)"""
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str] = mapped_column(String(64), nullable=False)
    color: Mapped[str] = mapped_column(String(16), nullable=False)


class AppSettingModel(Base):
    """Flat key-value settings store; values are JSON-encoded"""
    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class PushSubscription(Base):
    """Web Push endpoint registered by a browser"""
    __tablename__ = "push_subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    endpoint: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    p256dh: Mapped[str] = mapped_column(String(255), nullable=False)
    auth: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
