"""Account balance strategies.

Each account kind has one strategy object that knows how to fold the ledger
into a balance, whether that balance counts toward the user's net total, and
whether a prospective movement is allowed. Call sites ask the registry for the
strategy instead of branching on ``account.kind``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from ..errors import NotFoundError
from ..models.account import CASH, CREDIT, STANDARD, Account
from ..models.transaction import EXPENSE, INCOME, TRANSFER, Transaction


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating a prospective transaction against an account."""

    ok: bool
    reason: str | None = None
    available: float | None = None
    used_credit: float | None = None


class BalanceStrategy(Protocol):
    """Contract shared by every account kind."""

    def balance_of(self, account: Account, transactions: Iterable[Transaction]) -> float:
        ...  # pragma: no cover - interface

    def include_in_aggregate(self) -> bool:
        ...  # pragma: no cover - interface

    def validate(
        self,
        account: Account,
        amount: float,
        transactions: Iterable[Transaction],
        kind: str = EXPENSE,
    ) -> ValidationResult:
        ...  # pragma: no cover - interface


def signed_effect(txn: Transaction, account_id: int) -> float:
    """Return the signed effect of ``txn`` on ``account_id`` (0.0 when untouched)."""

    if not txn.touches(account_id):
        return 0.0
    effect = 0.0
    if txn.account_id == account_id:
        if txn.kind == INCOME:
            effect += txn.amount
        elif txn.kind in (EXPENSE, TRANSFER):
            effect -= txn.amount
    if txn.kind == TRANSFER and txn.to_account_id == account_id:
        effect += txn.amount
    return effect


class StandardStrategy:
    """Debit-like accounts: opening balance plus every paid movement."""

    def balance_of(self, account: Account, transactions: Iterable[Transaction]) -> float:
        balance = float(account.opening_balance or 0.0)
        for txn in transactions:
            if txn.paid:
                balance += signed_effect(txn, account.id)
        return balance

    def include_in_aggregate(self) -> bool:
        return True

    def validate(
        self,
        account: Account,
        amount: float,
        transactions: Iterable[Transaction],
        kind: str = EXPENSE,
    ) -> ValidationResult:
        # Overdrafts are allowed; the low-balance monitor reports them.
        return ValidationResult(ok=True)


class CashStrategy(StandardStrategy):
    """Cash wallets behave like standard accounts."""


class CreditStrategy:
    """Revolving credit: the reported balance is the credit still available."""

    def used_credit(self, account: Account, transactions: Iterable[Transaction]) -> float:
        charges = 0.0
        payments = 0.0
        for txn in transactions:
            if not txn.paid:
                continue
            if txn.account_id == account.id and txn.kind == EXPENSE:
                charges += txn.amount
            elif txn.account_id == account.id and txn.kind == INCOME:
                payments += txn.amount
            elif txn.kind == TRANSFER and txn.to_account_id == account.id:
                payments += txn.amount
        return charges - payments

    def balance_of(self, account: Account, transactions: Iterable[Transaction]) -> float:
        return float(account.credit_limit or 0.0) - self.used_credit(account, transactions)

    def include_in_aggregate(self) -> bool:
        return False

    def validate(
        self,
        account: Account,
        amount: float,
        transactions: Iterable[Transaction],
        kind: str = EXPENSE,
    ) -> ValidationResult:
        txns = list(transactions)
        used = self.used_credit(account, txns)
        available = float(account.credit_limit or 0.0) - used
        if kind == EXPENSE and used + amount > float(account.credit_limit or 0.0):
            return ValidationResult(
                ok=False,
                reason=f"Insufficient credit. Available: {available:.2f}",
                available=available,
            )
        if kind == INCOME and used <= 0:
            return ValidationResult(
                ok=False,
                reason="No outstanding debt on this card",
                available=available,
                used_credit=used,
            )
        if kind == INCOME and amount > used:
            return ValidationResult(
                ok=False,
                reason=f"Payment exceeds the outstanding debt of {used:.2f}",
                available=available,
                used_credit=used,
            )
        if kind == TRANSFER:
            return ValidationResult(
                ok=False,
                reason="Transfers cannot originate from a credit account",
                available=available,
            )
        return ValidationResult(ok=True, available=available)


_STRATEGIES: dict[str, BalanceStrategy] = {
    STANDARD: StandardStrategy(),
    CASH: CashStrategy(),
    CREDIT: CreditStrategy(),
}


def strategy_for(kind: str) -> BalanceStrategy:
    """Return the strategy registered for an account kind."""

    try:
        return _STRATEGIES[kind]
    except KeyError:
        raise NotFoundError("Balance strategy", kind) from None


def register_strategy(kind: str, strategy: BalanceStrategy) -> None:
    """Register (or replace) the strategy used for ``kind``."""

    _STRATEGIES[kind] = strategy


def has_strategy(kind: str) -> bool:
    return kind in _STRATEGIES


def balance_of(account: Account, transactions: Iterable[Transaction]) -> float:
    return strategy_for(account.kind).balance_of(account, transactions)


def included_in_aggregate(kind: str) -> bool:
    return strategy_for(kind).include_in_aggregate()


def validate_transaction(
    account: Account,
    amount: float,
    transactions: Iterable[Transaction],
    kind: str = EXPENSE,
) -> ValidationResult:
    return strategy_for(account.kind).validate(account, amount, transactions, kind)


def used_credit(account: Account, transactions: Iterable[Transaction]) -> float:
    strategy = strategy_for(account.kind)
    if not isinstance(strategy, CreditStrategy):
        raise ValueError(f"Account {account.id} is not a credit account")
    return strategy.used_credit(account, transactions)


def balances_by_account(
    accounts: Iterable[Account], transactions: Iterable[Transaction]
) -> dict[int, float]:
    """Return ``{account_id: balance}`` for every account with an id."""

    txns = list(transactions)
    return {a.id: balance_of(a, txns) for a in accounts if a.id is not None}


def aggregate_balance(accounts: Iterable[Account], transactions: Iterable[Transaction]) -> float:
    """Sum balances of the accounts whose kind counts toward the net total."""

    txns = list(transactions)
    return sum(
        balance_of(account, txns)
        for account in accounts
        if included_in_aggregate(account.kind)
    )


__all__ = [
    "BalanceStrategy",
    "CashStrategy",
    "CreditStrategy",
    "StandardStrategy",
    "ValidationResult",
    "aggregate_balance",
    "balance_of",
    "balances_by_account",
    "has_strategy",
    "included_in_aggregate",
    "register_strategy",
    "signed_effect",
    "strategy_for",
    "used_credit",
    "validate_transaction",
]
