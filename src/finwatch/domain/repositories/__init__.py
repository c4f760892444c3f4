"""Repository protocol definitions for domain layer."""

from .notification import NotificationStore

__all__ = ["NotificationStore"]
