"""Persisted alerts produced by the monitoring engine."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

BUDGET = "budget"
RECURRING = "recurring"
UNUSUAL_SPENDING = "unusual_spending"
LOW_BALANCE = "low_balance"
DEBT = "debt"
INFO = "info"
NOTIFICATION_TYPES = (BUDGET, RECURRING, UNUSUAL_SPENDING, LOW_BALANCE, DEBT, INFO)

SEVERITY_INFO = "info"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"
SEVERITY_SUCCESS = "success"

# Metadata keys that identify the originating entity, in id-building order.
ENTITY_KEYS = ("budget_id", "recurring_payment_id", "transaction_id", "account_id", "debt_id")


class Notification(SQLModel, table=True):
    """A notification record; ``id`` is deterministic per type, day and entity."""

    __tablename__: ClassVar[str] = "notification"

    id: Optional[str] = Field(default=None, primary_key=True, max_length=160)
    type: str = Field(nullable=False, max_length=32, index=True)
    severity: str = Field(default=SEVERITY_INFO, max_length=16)
    is_read: bool = Field(default=False, nullable=False)
    title: str = Field(nullable=False, max_length=160)
    message: str = Field(default="", max_length=512)
    deep_link: Optional[str] = Field(default=None, max_length=128)
    meta: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=False), index=True)
    )

    def entity_ids(self) -> list[str]:
        """Return the originating entity ids present in ``meta``."""
        meta = self.meta or {}
        return [str(meta[key]) for key in ENTITY_KEYS if meta.get(key) is not None]
