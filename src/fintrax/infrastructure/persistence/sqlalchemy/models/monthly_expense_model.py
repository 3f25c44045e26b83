"""SQLAlchemy model for recurring monthly expenses."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from fintrax.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    UpdatedAtMixin,
)


class MonthlyExpenseModel(Base, UpdatedAtMixin):
    """Database model for monthly expenses."""

    __tablename__ = "monthly_expenses"

    __table_args__ = (Index("ix_monthly_expenses_active_due", "is_active", "due_day"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)

    amount_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    scale: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    due_day: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Domain-owned timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    last_paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
