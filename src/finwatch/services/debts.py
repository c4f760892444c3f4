"""Personal debt bookkeeping (money lent to or borrowed from people)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from ..errors import InvalidInputError
from ..models.debt import BORROWED, LENT, Debt
from ..models.transaction import Transaction


@dataclass(slots=True)
class DebtStats:
    total_lent: float
    total_borrowed: float
    active_lent_count: int
    active_borrowed_count: int
    settled_count: int
    total_count: int


def register_debt_payment(debt: Debt, amount: float, *, now: datetime | None = None) -> Debt:
    """Apply a repayment to ``debt``.

    The remaining amount only ever goes down; overpayments settle the debt at
    exactly zero.
    """

    if amount <= 0:
        raise InvalidInputError("Payment amount must be greater than 0")
    if debt.is_settled:
        raise InvalidInputError(f"Debt {debt.id} is already settled")

    remaining = max(0.0, float(debt.remaining_amount) - amount)
    debt.remaining_amount = remaining
    if remaining == 0.0:
        debt.is_settled = True
        debt.settled_at = now or datetime.now()
    return debt


def days_outstanding(debt: Debt, now: datetime) -> int:
    """Whole days elapsed since the debt was created."""

    if debt.created_at is None:
        return 0
    return max((now - debt.created_at).days, 0)


def debt_transactions(debt_id: int, transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.debt_id == debt_id]


def debt_stats(debts: Iterable[Debt]) -> DebtStats:
    """Totals of open debts by direction plus counts."""

    items = list(debts)
    active = [d for d in items if not d.is_settled]
    lent = [d for d in active if d.direction == LENT]
    borrowed = [d for d in active if d.direction == BORROWED]
    return DebtStats(
        total_lent=sum(d.remaining_amount for d in lent),
        total_borrowed=sum(d.remaining_amount for d in borrowed),
        active_lent_count=len(lent),
        active_borrowed_count=len(borrowed),
        settled_count=len(items) - len(active),
        total_count=len(items),
    )


__all__ = [
    "DebtStats",
    "days_outstanding",
    "debt_stats",
    "debt_transactions",
    "register_debt_payment",
]
