"""Informal debts between the user and another person."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

LENT = "lent"
BORROWED = "borrowed"


class Debt(SQLModel, table=True):
    """Money lent to, or borrowed from, a counterparty."""

    __tablename__: ClassVar[str] = "debt"

    id: Optional[int] = Field(default=None, primary_key=True)
    counterparty: str = Field(nullable=False, max_length=80)
    direction: str = Field(default=BORROWED, max_length=16, description="lent | borrowed")
    original_amount: float = Field(nullable=False, gt=0)
    remaining_amount: float = Field(nullable=False, ge=0)
    is_settled: bool = Field(default=False, nullable=False)
    settled_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=False))
    )
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=False), nullable=False))
