"""Monitoring engine: evaluators, notification manager and popup queue."""

from .balance import BalanceMonitor
from .base import DailyMonitor, Ledger, Monitor, TTLCache
from .budget import BudgetMonitor
from .debts import DebtMonitor
from .engine import MonitoringEngine
from .manager import NotificationDraft, NotificationManager, notification_id
from .payments import PaymentMonitor, next_due_date
from .popups import PopupPresenter, PopupQueue
from .spending import SpendingAnalyzer

__all__ = [
    "BalanceMonitor",
    "BudgetMonitor",
    "DailyMonitor",
    "DebtMonitor",
    "Ledger",
    "Monitor",
    "MonitoringEngine",
    "NotificationDraft",
    "NotificationManager",
    "PaymentMonitor",
    "PopupPresenter",
    "PopupQueue",
    "SpendingAnalyzer",
    "TTLCache",
    "next_due_date",
    "notification_id",
]
