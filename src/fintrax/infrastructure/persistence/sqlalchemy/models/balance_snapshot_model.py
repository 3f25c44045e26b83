"""SQLAlchemy model for balance snapshots (insert-only)."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from fintrax.infrastructure.persistence.sqlalchemy.models.base import Base


class BalanceSnapshotModel(Base):
    """Database model for derived balance snapshots."""

    __tablename__ = "balance_snapshots"

    __table_args__ = (
        Index(
            "ix_balance_snapshots_scope",
            "granularity",
            "bucket_key",
            "computed_at",
        ),
        Index("ix_balance_snapshots_computed_at", "computed_at"),
    )

    # Insertion order; breaks ties between equal computed_at values
    sequence: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    id: Mapped[UUID] = mapped_column(Uuid, unique=True, nullable=False)

    granularity: Mapped[str | None] = mapped_column(
        String(16),
        nullable=True,
        comment="NULL for the ledger-wide lifetime scope",
    )
    bucket_key: Mapped[str] = mapped_column(String(16), nullable=False)

    total_income_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_expenses_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    net_balance_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    scale: Mapped[int] = mapped_column(Integer, nullable=False, default=2)

    computed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
