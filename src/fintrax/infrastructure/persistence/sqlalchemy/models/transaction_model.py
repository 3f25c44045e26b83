"""SQLAlchemy model for ledger transactions."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from fintrax.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class TransactionModel(Base, TimestampMixin):
    """Database model for ledger transactions."""

    __tablename__ = "ledger_transactions"

    __table_args__ = (
        # Range queries are ordered by (occurred_at, id)
        Index("ix_ledger_transactions_occurred_at_id", "occurred_at", "id"),
        Index("ix_ledger_transactions_type", "type"),
        Index("ix_ledger_transactions_category", "category"),
    )

    # Primary key (UUID from domain)
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)

    # Money as integer minor units, never floating point
    amount_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    scale: Mapped[int] = mapped_column(Integer, nullable=False, default=2)

    description: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="INCOME or EXPENSE",
    )
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    recurrence: Mapped[str | None] = mapped_column(
        String(16),
        nullable=True,
        comment="Template marker only; never expanded",
    )

    def __repr__(self) -> str:
        return (
            f"<TransactionModel(id={self.id}, type={self.type}, "
            f"amount_minor={self.amount_minor}, occurred_at={self.occurred_at})>"
        )
