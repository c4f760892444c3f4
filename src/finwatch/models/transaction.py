"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

INCOME = "income"
EXPENSE = "expense"
TRANSFER = "transfer"
TRANSACTION_KINDS = (INCOME, EXPENSE, TRANSFER)


@dataclass(frozen=True, slots=True)
class InterestSnapshot:
    """Financing terms captured when a credit purchase was recorded."""

    has_interest: bool
    installment_count: int
    installment_amount: float
    total_interest: float
    rate_at_purchase: float


class Transaction(SQLModel, table=True):
    """A single ledger movement. ``amount`` is always a positive magnitude."""

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    kind: str = Field(default=EXPENSE, max_length=16, description="income | expense | transfer")
    amount: float = Field(nullable=False, ge=0)
    category: str = Field(default="", max_length=64, index=True)
    memo: str = Field(default="", max_length=500)
    account_id: int = Field(foreign_key="account.id", nullable=False, index=True)
    to_account_id: Optional[int] = Field(default=None, foreign_key="account.id")
    paid: bool = Field(default=True, nullable=False)
    occurred_at: datetime = Field(
        sa_column=Column(DateTime(timezone=False), nullable=False, index=True)
    )
    recurring_payment_id: Optional[int] = Field(default=None, foreign_key="recurring_payment.id")
    debt_id: Optional[int] = Field(default=None, foreign_key="debt.id")

    # Financing snapshot, only for expenses on credit accounts.
    has_interest: Optional[bool] = Field(default=None)
    installment_count: Optional[int] = Field(default=None, ge=1)
    installment_amount: Optional[float] = Field(default=None)
    total_interest: Optional[float] = Field(default=None)
    rate_at_purchase: Optional[float] = Field(default=None)

    @property
    def is_paid_expense(self) -> bool:
        return self.kind == EXPENSE and self.paid

    def touches(self, account_id: int) -> bool:
        return self.account_id == account_id or (
            self.kind == TRANSFER and self.to_account_id == account_id
        )

    @property
    def interest_snapshot(self) -> InterestSnapshot | None:
        if self.installment_count is None:
            return None
        return InterestSnapshot(
            has_interest=bool(self.has_interest),
            installment_count=self.installment_count,
            installment_amount=float(self.installment_amount or 0.0),
            total_interest=float(self.total_interest or 0.0),
            rate_at_purchase=float(self.rate_at_purchase or 0.0),
        )


__all__ = [
    "EXPENSE",
    "INCOME",
    "InterestSnapshot",
    "TRANSACTION_KINDS",
    "TRANSFER",
    "Transaction",
]
