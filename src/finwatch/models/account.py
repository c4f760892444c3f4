"""Ledger accounts: standard, cash and revolving credit."""

from __future__ import annotations

from typing import ClassVar, Iterable, Optional

from sqlmodel import Field, SQLModel

STANDARD = "standard"
CASH = "cash"
CREDIT = "credit"
ACCOUNT_KINDS = (STANDARD, CASH, CREDIT)


class Account(SQLModel, table=True):
    """A place where money lives (or, for credit cards, where it is borrowed)."""

    __tablename__: ClassVar[str] = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=128)
    kind: str = Field(default=STANDARD, max_length=16, description="standard | cash | credit")
    opening_balance: float = Field(default=0.0, nullable=False)
    credit_limit: float = Field(default=0.0, nullable=False)
    cutoff_day: Optional[int] = Field(default=None, ge=1, le=31)
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)
    annual_rate: Optional[float] = Field(default=None, description="Effective annual rate, percent")
    funding_account_id: Optional[int] = Field(default=None, foreign_key="account.id")
    is_default: bool = Field(default=False, nullable=False)
    sort_order: int = Field(default=0, nullable=False)

    @property
    def is_credit(self) -> bool:
        return self.kind == CREDIT

    @property
    def has_billing_cycle(self) -> bool:
        return self.is_credit and bool(self.cutoff_day) and bool(self.payment_day)


def prepare_account(account: Account) -> Account:
    """Normalize an account before it is handed to storage.

    Credit accounts never carry an opening balance: their balance is derived
    from the limit and the charges posted against it.
    """

    if account.kind not in ACCOUNT_KINDS:
        raise ValueError(f"Unknown account kind: {account.kind!r}")
    if account.is_credit:
        account.opening_balance = 0.0
        if account.credit_limit < 0:
            raise ValueError("Credit limit cannot be negative.")
    for label, day in (("cutoff_day", account.cutoff_day), ("payment_day", account.payment_day)):
        if day is not None and not 1 <= day <= 31:
            raise ValueError(f"{label} must be between 1 and 31")
    return account


def ensure_single_default(accounts: Iterable[Account], default_id: int) -> list[Account]:
    """Flag ``default_id`` as the default account and clear the flag elsewhere.

    Returns the accounts whose flag changed so the caller can persist them.
    """

    items = list(accounts)
    if not any(a.id == default_id for a in items):
        raise LookupError(f"Account not found: {default_id}")

    changed: list[Account] = []
    for account in items:
        wanted = account.id == default_id
        if account.is_default != wanted:
            account.is_default = wanted
            changed.append(account)
    return changed


__all__ = [
    "ACCOUNT_KINDS",
    "Account",
    "CASH",
    "CREDIT",
    "STANDARD",
    "ensure_single_default",
    "prepare_account",
]
