"""Credit card billing cycles and statements."""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable

from ..errors import InvalidInputError
from ..models.account import Account
from ..models.transaction import EXPENSE, INCOME, TRANSFER, Transaction


@dataclass(frozen=True, slots=True)
class BillingCycle:
    """Statement window (both ends inclusive) and the date its balance is due."""

    cycle_start: date
    cycle_end: date
    payment_due_date: date

    def contains(self, moment: date | datetime) -> bool:
        day = moment.date() if isinstance(moment, datetime) else moment
        return self.cycle_start <= day <= self.cycle_end


@dataclass(slots=True)
class Statement:
    """Charges and payments posted to a credit account inside one cycle."""

    account_id: int
    cycle: BillingCycle
    total_charges: float
    total_payments: float
    installment_charges: float
    regular_charges: float
    days_until_due: int
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def balance(self) -> float:
        return self.total_charges - self.total_payments


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def clamp_day(year: int, month: int, day: int) -> date:
    """Return ``day`` in the given month, clamped to the month's last day."""

    return date(year, month, min(day, monthrange(year, month)[1]))


def _check_day(label: str, day: int) -> None:
    if not 1 <= day <= 31:
        raise InvalidInputError(f"{label} must be between 1 and 31, got {day}")


def current_cycle(
    cutoff_day: int, payment_day: int, as_of: date | datetime | None = None
) -> BillingCycle:
    """Compute the billing cycle that ``as_of`` (default: today) falls into.

    The cycle closes on this month's cutoff when it has not passed yet, or on
    next month's cutoff otherwise. It opens the day after the previous cutoff
    and is due on ``payment_day`` of the month after it closes.
    """

    _check_day("cutoff_day", cutoff_day)
    _check_day("payment_day", payment_day)

    today = as_of or date.today()
    if isinstance(today, datetime):
        today = today.date()

    end_year, end_month = today.year, today.month
    if today.day > clamp_day(end_year, end_month, cutoff_day).day:
        end_year, end_month = _shift_month(end_year, end_month, 1)
    cycle_end = clamp_day(end_year, end_month, cutoff_day)

    prev_year, prev_month = _shift_month(end_year, end_month, -1)
    cycle_start = clamp_day(prev_year, prev_month, cutoff_day) + timedelta(days=1)

    pay_year, pay_month = _shift_month(end_year, end_month, 1)
    payment_due = clamp_day(pay_year, pay_month, payment_day)

    return BillingCycle(cycle_start=cycle_start, cycle_end=cycle_end, payment_due_date=payment_due)


def statement_for(
    account: Account,
    transactions: Iterable[Transaction],
    as_of: date | datetime | None = None,
) -> Statement:
    """Summarize the current cycle of a credit account."""

    if not account.has_billing_cycle:
        raise InvalidInputError(f"Account {account.id} has no billing cycle configured")

    today = as_of or date.today()
    if isinstance(today, datetime):
        today = today.date()
    cycle = current_cycle(account.cutoff_day, account.payment_day, today)

    in_cycle = [
        txn
        for txn in transactions
        if cycle.contains(txn.occurred_at)
        and txn.touches(account.id)
    ]

    charges = [t for t in in_cycle if t.account_id == account.id and t.kind == EXPENSE]
    total_charges = sum(t.amount for t in charges)
    total_payments = sum(
        t.amount
        for t in in_cycle
        if (t.account_id == account.id and t.kind == INCOME)
        or (t.kind == TRANSFER and t.to_account_id == account.id)
    )

    financed = [t for t in charges if (t.installment_count or 1) > 1]
    installment_charges = sum(t.installment_amount or t.amount for t in financed)
    regular_charges = total_charges - sum(t.amount for t in financed)

    return Statement(
        account_id=account.id,
        cycle=cycle,
        total_charges=total_charges,
        total_payments=total_payments,
        installment_charges=installment_charges,
        regular_charges=regular_charges,
        days_until_due=(cycle.payment_due_date - today).days,
        transactions=in_cycle,
    )


def statements_for(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    as_of: date | datetime | None = None,
) -> list[Statement]:
    """Return statements for every credit account with a configured cycle."""

    txns = list(transactions)
    return [
        statement_for(account, txns, as_of)
        for account in accounts
        if account.has_billing_cycle
    ]


__all__ = [
    "BillingCycle",
    "Statement",
    "clamp_day",
    "current_cycle",
    "statement_for",
    "statements_for",
]
