"""Low balance alerts."""

from __future__ import annotations

import logging
from datetime import timedelta

from ..errors import NotFoundError
from ..models.account import Account
from ..models.notification import LOW_BALANCE, SEVERITY_WARNING
from ..services.balances import balance_of
from .base import Monitor, TTLCache
from .manager import NotificationDraft

logger = logging.getLogger("finwatch.monitoring.balance")

COOLDOWN = timedelta(hours=24)


class BalanceMonitor(Monitor):
    """Alerts when an account drops under its threshold, at most once a day per account."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cooldowns: TTLCache[bool] = TTLCache(COOLDOWN, self.clock)

    def evaluate(self, account_id: int) -> None:
        try:
            account = self.ledger.account(account_id)
        except NotFoundError:
            logger.warning("Account not found for balance evaluation", extra={"account_id": account_id})
            return

        balance = self.account_balance(account)
        threshold = self.threshold_for(account)

        if not self.is_low(account, balance, threshold):
            # Recovered: the next drop alerts immediately.
            self.cooldowns.discard(account_id)
            return

        if self.in_cooldown(account_id):
            logger.info("Balance alert in cooldown period", extra={"account_id": account_id})
            return

        self.manager.create_notification(
            NotificationDraft(
                type=LOW_BALANCE,
                title=f"Low balance: {account.name}",
                message=f"The balance of {balance:,.0f} is below the threshold of {threshold:,.0f}",
                severity=SEVERITY_WARNING,
                deep_link="/accounts",
                meta={"account_id": account_id, "amount": balance, "threshold": threshold},
            )
        )
        self.cooldowns.put(account_id, True)

    def account_balance(self, account: Account) -> float:
        return balance_of(account, self.ledger.transactions)

    def threshold_for(self, account: Account) -> float:
        # Credit cards alert once available credit is exhausted.
        if account.is_credit:
            return 0.0
        return float(self.preferences.thresholds.low_balance)

    @staticmethod
    def is_low(account: Account, balance: float, threshold: float) -> bool:
        if account.is_credit:
            return balance <= threshold
        return balance < threshold

    def in_cooldown(self, account_id: int) -> bool:
        return self.cooldowns.get(account_id) is not None

    def reset_cooldown(self, account_id: int) -> None:
        self.cooldowns.discard(account_id)

    def sweep(self) -> int:
        return self.cooldowns.sweep()


__all__ = ["BalanceMonitor"]
