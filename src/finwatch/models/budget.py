"""Budgeting tables."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Budget(SQLModel, table=True):
    """Monthly spending limit for one category."""

    __tablename__: ClassVar[str] = "budget"

    id: Optional[int] = Field(default=None, primary_key=True)
    category: str = Field(nullable=False, max_length=64, index=True)
    monthly_limit: float = Field(nullable=False, ge=0)
    is_active: bool = Field(default=True, nullable=False)
