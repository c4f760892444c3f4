"""Input checks for transactions and accounts before they reach the ledger.

Each validator collects every problem it finds instead of stopping at the
first, so a form can show them all at once. Balance limits are a separate
concern handled by the account strategies in :mod:`finwatch.services.balances`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..models.account import CREDIT, Account
from ..models.transaction import EXPENSE, TRANSFER, Transaction

MIN_AMOUNT = 0.01
MAX_AMOUNT = 999_999_999_999.0
MAX_MEMO_LENGTH = 500

MIN_CREDIT_LIMIT = 1.0
MAX_CREDIT_LIMIT = 1_000_000_000.0
OPENING_BALANCE_BOUND = 1_000_000_000.0


@dataclass(slots=True)
class InputCheck:
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def check_amount(amount: Optional[float]) -> list[str]:
    if amount is None:
        return ["Amount is required"]
    if amount < MIN_AMOUNT:
        return ["Amount must be greater than 0"]
    if amount > MAX_AMOUNT:
        return [f"Amount cannot be greater than {MAX_AMOUNT:,.0f}"]
    return []


def check_memo(memo: str) -> list[str]:
    if not memo.strip():
        return ["Description cannot be empty"]
    if len(memo) > MAX_MEMO_LENGTH:
        return [f"Description cannot be longer than {MAX_MEMO_LENGTH} characters"]
    return []


def validate_transaction_input(
    txn: Transaction,
    *,
    account_balance: Optional[float] = None,
    account_kind: Optional[str] = None,
) -> InputCheck:
    """Check a prospective transaction.

    When ``account_balance`` is given, expenses and outgoing transfers may not
    exceed it, except on credit accounts whose limit is checked elsewhere.
    """

    errors = check_memo(txn.memo or "")

    if txn.kind != TRANSFER and not txn.category:
        errors.append("A category is required")
    if txn.kind == TRANSFER:
        if txn.to_account_id is None:
            errors.append("A destination account is required")
        elif txn.account_id is not None and txn.account_id == txn.to_account_id:
            errors.append("Cannot transfer to the same account")

    amount_errors = check_amount(txn.amount)
    errors.extend(amount_errors)

    if (
        not amount_errors
        and txn.kind in (EXPENSE, TRANSFER)
        and account_balance is not None
        and account_kind != CREDIT
        and txn.amount > account_balance
    ):
        errors.append("Insufficient balance for this transaction")

    return InputCheck(errors)


def validate_account_input(account: Account, *, editing: bool = False) -> InputCheck:
    """Check a new account. Limits and days are only checked on creation."""

    errors: list[str] = []
    if not (account.name or "").strip():
        errors.append("Account name cannot be empty")
    if editing:
        return InputCheck(errors)

    if account.kind == CREDIT:
        limit = account.credit_limit
        if limit is None or limit < MIN_CREDIT_LIMIT:
            errors.append("Credit limit must be greater than 0")
        elif limit > MAX_CREDIT_LIMIT:
            errors.append(f"Credit limit cannot be greater than {MAX_CREDIT_LIMIT:,.0f}")
        for label, day in (("Cutoff day", account.cutoff_day), ("Payment day", account.payment_day)):
            if day is None or not 1 <= day <= 31:
                errors.append(f"{label} must be between 1 and 31")
        if (
            account.cutoff_day is not None
            and account.payment_day is not None
            and account.payment_day <= account.cutoff_day
        ):
            errors.append("Payment day must come after the cutoff day")
    else:
        opening = float(account.opening_balance or 0.0)
        if not -OPENING_BALANCE_BOUND <= opening <= OPENING_BALANCE_BOUND:
            errors.append(
                f"Opening balance must be between {-OPENING_BALANCE_BOUND:,.0f} "
                f"and {OPENING_BALANCE_BOUND:,.0f}"
            )

    return InputCheck(errors)


def validate_category_name(name: str, existing: Iterable[str]) -> InputCheck:
    if not name.strip():
        return InputCheck(["Category name cannot be empty"])
    if name.strip() in set(existing):
        return InputCheck(["That category already exists"])
    return InputCheck()


__all__ = [
    "InputCheck",
    "MAX_AMOUNT",
    "MIN_AMOUNT",
    "check_amount",
    "check_memo",
    "validate_account_input",
    "validate_category_name",
    "validate_transaction_input",
]
