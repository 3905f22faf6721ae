"""
Depreciation ledger table.

One row per (asset, fiscal year). The unique constraint is what keeps a
year from being booked twice, even when two writers race.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from corpbooks.db.base_class import Base
from corpbooks.models.fiscal_schemas import DepreciationEntry


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class DepreciationEntryRecord(Base):
    __tablename__ = "depreciation_entries"
    __table_args__ = (UniqueConstraint("asset_id", "fiscal_year"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Ids are stored as text so both integer and string identifiers fit.
    asset_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    company_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    fiscal_year: Mapped[int] = mapped_column(Integer, nullable=False)
    depreciation_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    is_half_year: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    entry_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    def to_entry(self) -> DepreciationEntry:
        return DepreciationEntry(
            id=self.id,
            asset_id=self.asset_id,
            company_id=self.company_id,
            fiscal_year=self.fiscal_year,
            amount=self.depreciation_amount,
            is_half_year=self.is_half_year,
            entry_date=self.entry_date,
        )
