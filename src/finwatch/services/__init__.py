"""Service module exports."""

from . import balances, billing_cycle, debts, duplicates, interest, validators

__all__ = [
    "balances",
    "billing_cycle",
    "debts",
    "duplicates",
    "interest",
    "validators",
]
