"""Interest calculations for financed credit card purchases.

Rates are *effective* annual percentages (already compounded), so the monthly
rate is ``(1 + pct/100) ** (1/12) - 1`` rather than ``pct / 12``. Installments
follow the fixed-payment (annuity) schedule::

    C = P * i * (1 + i) ** n / ((1 + i) ** n - 1)

Results are computed once, when the purchase is recorded, and frozen onto the
transaction so later rate changes on the card never rewrite history.
"""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..errors import InvalidInputError, InvalidRateError, SnapshotFrozenError
from ..models.account import Account
from ..models.transaction import EXPENSE, Transaction

MAX_ANNUAL_RATE = 200.0
MAX_INSTALLMENTS = 60
COMMON_INSTALLMENTS = (1, 2, 3, 6, 9, 12, 18, 24, 36, 48, 60)

INSTALLMENT_OPTIONS = (
    (1, "1 installment (no interest)"),
    (2, "2 installments"),
    (3, "3 installments"),
    (6, "6 installments"),
    (9, "9 installments"),
    (12, "12 installments"),
    (18, "18 installments"),
    (24, "24 installments"),
    (36, "36 installments"),
)


@dataclass(frozen=True, slots=True)
class InterestPlan:
    """Frozen financing terms for one purchase."""

    installment_amount: float
    total_amount: float
    total_interest: float
    monthly_rate: float
    annual_pct_snapshot: float
    installment_count: int
    has_interest: bool


@dataclass(slots=True)
class InstallmentRow:
    """A single installment split into principal and interest."""

    number: int
    due_date: date
    payment: float
    principal: float
    interest: float
    remaining_balance: float


def _to_cents(amount: float) -> float:
    return float(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def annual_to_monthly_rate(annual_pct: float) -> float:
    """Convert an effective annual rate in percent to a monthly decimal rate."""

    if annual_pct is None or annual_pct < 0 or annual_pct > MAX_ANNUAL_RATE:
        raise InvalidRateError(
            f"Annual rate must be between 0% and {MAX_ANNUAL_RATE:.0f}%, got {annual_pct}"
        )
    return (1 + annual_pct / 100) ** (1 / 12) - 1


def fixed_installment(principal: float, monthly_rate: float, count: int) -> float:
    """Return the fixed installment for ``principal`` over ``count`` months."""

    if principal <= 0:
        raise InvalidInputError("Principal must be greater than 0")
    if count < 1:
        raise InvalidInputError("Installment count must be at least 1")
    if monthly_rate < 0:
        raise InvalidInputError("Monthly rate cannot be negative")

    if count == 1:
        return principal
    if monthly_rate == 0:
        return principal / count

    growth = (1 + monthly_rate) ** count
    return principal * (monthly_rate * growth) / (growth - 1)


def compute_interest_plan(
    principal: float, annual_pct: float | None, count: int, wants_interest: bool
) -> InterestPlan:
    """Compute installment, totals and rate snapshot for a financed purchase.

    A single installment is always interest-free, whatever the caller asked.
    Values are rounded to cents only once, at the end.
    """

    if principal <= 0:
        raise InvalidInputError("Principal must be greater than 0")
    if count < 1:
        raise InvalidInputError("Installment count must be at least 1")

    has_interest = wants_interest and count > 1
    snapshot = float(annual_pct or 0.0)

    if not has_interest:
        return InterestPlan(
            installment_amount=_to_cents(principal / count),
            total_amount=_to_cents(principal),
            total_interest=0.0,
            monthly_rate=0.0,
            annual_pct_snapshot=snapshot,
            installment_count=count,
            has_interest=False,
        )

    monthly_rate = annual_to_monthly_rate(snapshot)
    installment = fixed_installment(principal, monthly_rate, count)
    total = installment * count

    return InterestPlan(
        installment_amount=_to_cents(installment),
        total_amount=_to_cents(total),
        total_interest=_to_cents(total - principal),
        monthly_rate=monthly_rate,
        annual_pct_snapshot=snapshot,
        installment_count=count,
        has_interest=True,
    )


def validate_interest_config(principal: float, annual_pct: float, count: int) -> list[str]:
    """Return human readable problems with a financing setup (empty when valid)."""

    errors: list[str] = []
    if principal <= 0:
        errors.append("Amount must be greater than 0")
    if annual_pct < 0 or annual_pct > MAX_ANNUAL_RATE:
        errors.append("Interest rate must be between 0% and 200%")
    if count < 1 or count > MAX_INSTALLMENTS:
        errors.append(f"Installment count must be between 1 and {MAX_INSTALLMENTS}")
    elif count not in COMMON_INSTALLMENTS:
        errors.append(
            "Non-standard installment count. Common values: "
            + ", ".join(str(v) for v in COMMON_INSTALLMENTS)
        )
    return errors


def plan_for_account(
    account: Account, principal: float, count: int, wants_interest: bool
) -> InterestPlan:
    """Resolve the card's current rate and compute the plan for a new purchase."""

    if not account.is_credit:
        raise InvalidInputError("Only credit accounts finance purchases in installments")
    return compute_interest_plan(principal, account.annual_rate or 0.0, count, wants_interest)


def attach_interest_plan(txn: Transaction, plan: InterestPlan) -> Transaction:
    """Freeze ``plan`` onto ``txn``. An existing snapshot is never overwritten."""

    if txn.kind != EXPENSE:
        raise InvalidInputError("Only expenses can be financed")
    if txn.installment_count is not None:
        raise SnapshotFrozenError(f"Transaction {txn.id} already carries an interest snapshot")

    txn.has_interest = plan.has_interest
    txn.installment_count = plan.installment_count
    txn.installment_amount = plan.installment_amount
    txn.total_interest = plan.total_interest
    txn.rate_at_purchase = plan.annual_pct_snapshot
    return txn


def _add_months(start: date, months: int, day: int) -> date:
    index = start.year * 12 + (start.month - 1) + months
    year, month = index // 12, index % 12 + 1
    return date(year, month, min(day, monthrange(year, month)[1]))


def installment_schedule(
    principal: float, plan: InterestPlan, *, start: date | None = None
) -> list[InstallmentRow]:
    """Split every installment of ``plan`` into principal and interest.

    The first installment falls one month after ``start`` (default: today).
    The last row absorbs rounding residue so the balance closes at zero.
    """

    if principal <= 0:
        raise InvalidInputError("Principal must be greater than 0")

    first = start or date.today()
    balance = float(principal)
    rows: list[InstallmentRow] = []
    for number in range(1, plan.installment_count + 1):
        interest = balance * plan.monthly_rate
        if number == plan.installment_count:
            payment = balance + interest
        else:
            payment = plan.installment_amount
        principal_part = payment - interest
        balance = max(balance - principal_part, 0.0)
        rows.append(
            InstallmentRow(
                number=number,
                due_date=_add_months(first, number, first.day),
                payment=_to_cents(payment),
                principal=_to_cents(principal_part),
                interest=_to_cents(interest),
                remaining_balance=_to_cents(balance),
            )
        )
    return rows


@dataclass(slots=True)
class CardInterest:
    """Financed-interest figures for one credit card."""

    account_id: int
    name: str
    annual_rate: float
    monthly_interest: float
    yearly_interest: float
    total_interest: float
    pending_installments: float
    transaction_count: int


def card_interest_summary(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    as_of: date | datetime | None = None,
) -> list[CardInterest]:
    """Summarize frozen interest on every credit card that carries a rate."""

    today = as_of or date.today()
    if isinstance(today, datetime):
        today = today.date()
    txns = list(transactions)

    summary: list[CardInterest] = []
    for card in accounts:
        if not card.is_credit or not card.annual_rate:
            continue
        financed = [
            t
            for t in txns
            if t.account_id == card.id and t.kind == EXPENSE and (t.total_interest or 0) > 0
        ]
        monthly = sum(
            t.total_interest
            for t in financed
            if (t.occurred_at.year, t.occurred_at.month) == (today.year, today.month)
        )
        yearly = sum(t.total_interest for t in financed if t.occurred_at.year == today.year)
        pending = 0.0
        for t in financed:
            if not t.installment_count or not t.installment_amount:
                continue
            months_passed = (today.year - t.occurred_at.year) * 12 + (today.month - t.occurred_at.month)
            pending += max(0, t.installment_count - months_passed) * t.installment_amount

        summary.append(
            CardInterest(
                account_id=card.id,
                name=card.name,
                annual_rate=float(card.annual_rate),
                monthly_interest=_to_cents(monthly),
                yearly_interest=_to_cents(yearly),
                total_interest=_to_cents(sum(t.total_interest for t in financed)),
                pending_installments=_to_cents(pending),
                transaction_count=len(financed),
            )
        )
    return summary


__all__ = [
    "CardInterest",
    "INSTALLMENT_OPTIONS",
    "InstallmentRow",
    "InterestPlan",
    "annual_to_monthly_rate",
    "attach_interest_plan",
    "card_interest_summary",
    "compute_interest_plan",
    "fixed_installment",
    "installment_schedule",
    "plan_for_account",
    "validate_interest_config",
]
