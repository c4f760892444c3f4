"""Recurring payment definitions (rent, subscriptions, insurance...)."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

MONTHLY = "monthly"
YEARLY = "yearly"


class RecurringPayment(SQLModel, table=True):
    __tablename__: ClassVar[str] = "recurring_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80)
    amount: float = Field(nullable=False, ge=0)
    due_day: int = Field(default=1, ge=1, le=31)
    frequency: str = Field(default=MONTHLY, max_length=16, description="monthly | yearly")
    # Only meaningful for yearly payments.
    due_month: int = Field(default=1, ge=1, le=12)
    is_active: bool = Field(default=True, nullable=False)
