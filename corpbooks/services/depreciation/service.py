"""
Depreciation booking service.

Combines the pure calculator with the ledger: previews a year, books it
once per asset and fiscal year, and runs a whole company's asset list for
a year collecting per-asset failures instead of stopping at the first one.
"""
import datetime as dt
import logging
from typing import Iterable, Optional

from corpbooks.core.exceptions import CorpBooksException, DuplicateDepreciationEntryError, UnsavedAssetError
from corpbooks.models.fiscal_schemas import (
    CapitalAsset,
    DepreciationEntry,
    DepreciationResult,
    DepreciationRun,
    EntityError,
    EntityId,
)
from corpbooks.services.collaborators import DepreciationLedger
from corpbooks.services.depreciation.calculator import DepreciationCalculator, apply_depreciation
from corpbooks.utils.currency import quantize_money

logger = logging.getLogger(__name__)


class DepreciationService:
    def __init__(self, ledger: DepreciationLedger, calculator: DepreciationCalculator):
        self.ledger = ledger
        self.calculator = calculator

    def preview(self, asset: CapitalAsset, fiscal_year: int) -> DepreciationResult:
        """Compute a year without booking it."""
        return self.calculator.compute_year(asset, fiscal_year)

    def create_entry(
        self,
        asset: CapitalAsset,
        fiscal_year: int,
        entry_date: Optional[dt.date] = None,
    ) -> tuple[DepreciationEntry, CapitalAsset]:
        """
        Book one fiscal year of depreciation for an asset.

        Returns the stored entry and the asset advanced by the booked amount.
        The booked amount is rounded to the cent and never exceeds book value.
        ``entry_date`` defaults to the close of the fiscal year.

        Raises:
            UnsavedAssetError: the asset has no id
            DuplicateDepreciationEntryError: the year is already booked
            ClassNotFoundError / InvalidFiscalYearError: from the calculator
        """
        if asset.id is None:
            raise UnsavedAssetError(asset.description)
        if self.ledger.exists(asset.id, fiscal_year):
            raise DuplicateDepreciationEntryError(asset.id, fiscal_year)

        result = self.calculator.compute_year(asset, fiscal_year)
        amount = min(quantize_money(result.amount), asset.book_value)

        entry = self.ledger.record(
            DepreciationEntry(
                asset_id=asset.id,
                company_id=asset.company_id,
                fiscal_year=fiscal_year,
                amount=amount,
                is_half_year=result.is_half_year,
                entry_date=entry_date or self.calculator.year_end(fiscal_year),
            )
        )

        updated = apply_depreciation(asset, amount)
        updated = updated.model_copy(
            update={"depreciation_entries": asset.depreciation_entries + (entry,)}
        )
        return entry, updated

    def run_fiscal_year(
        self,
        assets: Iterable[CapitalAsset],
        fiscal_year: int,
        entry_date: Optional[dt.date] = None,
        company_id: Optional[EntityId] = None,
    ) -> DepreciationRun:
        """Book ``fiscal_year`` for every asset; failures become ``EntityError`` records."""
        assets = list(assets)
        entries: list[DepreciationEntry] = []
        updated_assets: list[CapitalAsset] = []
        errors: list[EntityError] = []

        for asset in assets:
            try:
                entry, updated = self.create_entry(asset, fiscal_year, entry_date)
            except CorpBooksException as exc:
                logger.warning(f"Skipped depreciation for asset {asset.id} FY{fiscal_year}: {exc}")
                errors.append(EntityError.from_exception("capital_asset", asset.id, exc))
                continue
            entries.append(entry)
            updated_assets.append(updated)

        run = DepreciationRun(
            company_id=company_id,
            fiscal_year=fiscal_year,
            assets_total=len(assets),
            entries=tuple(entries),
            updated_assets=tuple(updated_assets),
            errors=tuple(errors),
        )
        logger.info(f"Depreciation run FY{fiscal_year}: {run.progress_message}")
        return run
