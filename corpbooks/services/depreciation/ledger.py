"""SQLAlchemy-backed, append-only depreciation ledger."""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from corpbooks.core.exceptions import DuplicateDepreciationEntryError
from corpbooks.models.fiscal_schemas import DepreciationEntry, EntityId
from corpbooks.models.ledger_models import DepreciationEntryRecord

logger = logging.getLogger(__name__)


def _key(entity_id: Optional[EntityId]) -> Optional[str]:
    return None if entity_id is None else str(entity_id)


class SqlAlchemyDepreciationLedger:
    """
    Stores booked depreciation entries.

    Entries are only ever inserted. Booking a year that already has an entry
    for the asset raises ``DuplicateDepreciationEntryError``.
    """

    def __init__(self, db: Session):
        self.db = db

    def exists(self, asset_id: EntityId, fiscal_year: int) -> bool:
        return (
            self.db.query(DepreciationEntryRecord.id)
            .filter(
                DepreciationEntryRecord.asset_id == _key(asset_id),
                DepreciationEntryRecord.fiscal_year == fiscal_year,
            )
            .first()
            is not None
        )

    def record(self, entry: DepreciationEntry) -> DepreciationEntry:
        """Insert an entry and return it with its ledger id."""
        if self.exists(entry.asset_id, entry.fiscal_year):
            raise DuplicateDepreciationEntryError(entry.asset_id, entry.fiscal_year)

        row = DepreciationEntryRecord(
            asset_id=_key(entry.asset_id),
            company_id=_key(entry.company_id),
            fiscal_year=entry.fiscal_year,
            depreciation_amount=entry.amount,
            is_half_year=entry.is_half_year,
            entry_date=entry.entry_date,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Another writer booked the same year between the check and the insert
            self.db.rollback()
            raise DuplicateDepreciationEntryError(entry.asset_id, entry.fiscal_year) from exc
        self.db.refresh(row)

        logger.info(
            f"Booked depreciation {row.depreciation_amount} for asset {row.asset_id} "
            f"FY{row.fiscal_year}"
        )
        return row.to_entry()

    def entries_for(self, asset_id: EntityId) -> List[DepreciationEntry]:
        rows = (
            self.db.query(DepreciationEntryRecord)
            .filter(DepreciationEntryRecord.asset_id == _key(asset_id))
            .order_by(DepreciationEntryRecord.fiscal_year)
            .all()
        )
        return [row.to_entry() for row in rows]

    def entries_for_company(self, company_id: EntityId, fiscal_year: Optional[int] = None) -> List[DepreciationEntry]:
        query = self.db.query(DepreciationEntryRecord).filter(
            DepreciationEntryRecord.company_id == _key(company_id)
        )
        if fiscal_year is not None:
            query = query.filter(DepreciationEntryRecord.fiscal_year == fiscal_year)
        rows = query.order_by(DepreciationEntryRecord.asset_id, DepreciationEntryRecord.fiscal_year).all()
        return [row.to_entry() for row in rows]
