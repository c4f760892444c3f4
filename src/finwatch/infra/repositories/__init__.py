"""Concrete notification store implementations."""

from .notification import InMemoryNotificationStore, SQLModelNotificationRepository, store_from_config

__all__ = [
    "InMemoryNotificationStore",
    "SQLModelNotificationRepository",
    "store_from_config",
]
