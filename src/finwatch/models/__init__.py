"""SQLModel table exports."""

from .account import Account
from .budget import Budget
from .debt import Debt
from .notification import Notification
from .preferences import NotificationPreferences
from .recurring import RecurringPayment
from .transaction import InterestSnapshot, Transaction

__all__ = [
    "Account",
    "Budget",
    "Debt",
    "InterestSnapshot",
    "Notification",
    "NotificationPreferences",
    "RecurringPayment",
    "Transaction",
]
