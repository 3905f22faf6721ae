"""Declining-balance depreciation with the acquisition-year half-year rule.

Pure computation: no ledger access. ``compute_year`` must be fed the asset
as it stood at the start of the fiscal year; applying its result (and
persisting it) is the caller's job.

Fiscal years are named by the calendar year they close in, using the
company's year end (December 31 unless told otherwise).
"""
import datetime as dt
import logging
from decimal import Decimal
from typing import Optional

from corpbooks.core.exceptions import InvalidFiscalYearError
from corpbooks.models.fiscal_schemas import CapitalAsset, CompanyTaxSettings, DepreciationResult, ScheduleRow
from corpbooks.services.cca_registry import DepreciationClassRegistry
from corpbooks.services.period_aggregation.period_utils import fiscal_year_end, fiscal_year_of
from corpbooks.utils.currency import ZERO

logger = logging.getLogger(__name__)

HALF_YEAR_FACTOR = Decimal("0.5")
DEFAULT_PROJECTION_YEARS = 10


def apply_depreciation(asset: CapitalAsset, amount: Decimal) -> CapitalAsset:
    """Return the asset with ``amount`` added to its accumulated depreciation."""
    accumulated = asset.accumulated_depreciation + amount
    data = asset.model_dump()
    data.update(
        accumulated_depreciation=accumulated,
        book_value=asset.total_cost - accumulated,
    )
    return CapitalAsset.model_validate(data)


class DepreciationCalculator:
    """Computes one fiscal year of depreciation for one asset."""

    def __init__(
        self,
        registry: DepreciationClassRegistry,
        fiscal_year_end_month: int = 12,
        fiscal_year_end_day: int = 31,
    ):
        self.registry = registry
        self.fiscal_year_end_month = fiscal_year_end_month
        self.fiscal_year_end_day = fiscal_year_end_day

    @classmethod
    def for_company(
        cls, registry: DepreciationClassRegistry, company: CompanyTaxSettings
    ) -> "DepreciationCalculator":
        return cls(registry, company.fiscal_year_end_month, company.fiscal_year_end_day)

    def fiscal_year_of(self, day: dt.date) -> int:
        return fiscal_year_of(day, self.fiscal_year_end_month, self.fiscal_year_end_day)

    def year_end(self, fiscal_year: int) -> dt.date:
        """Closing date of ``fiscal_year``; the default booking date."""
        return fiscal_year_end(fiscal_year, self.fiscal_year_end_month, self.fiscal_year_end_day)

    def compute_year(self, asset: CapitalAsset, fiscal_year: int) -> DepreciationResult:
        """
        Depreciation for ``fiscal_year``.

        1. Half-year rule applies when the asset was acquired in that fiscal
           year: ``depreciable_base * rate * 0.5``.
        2. Otherwise declining balance on the current book value:
           ``book_value * rate``.
        3. The amount never exceeds the book value; a fully depreciated
           asset yields zero.

        Raises:
            ClassNotFoundError: asset class is not in the registry
            InvalidFiscalYearError: year precedes acquisition or follows disposal
        """
        rate = self.registry.rate(asset.class_id)

        acquisition_year = self.fiscal_year_of(asset.acquisition_date)
        if fiscal_year < acquisition_year:
            raise InvalidFiscalYearError(
                fiscal_year, f"asset acquired in FY{acquisition_year}", asset_id=asset.id
            )
        if asset.disposal_date is not None:
            disposal_year = self.fiscal_year_of(asset.disposal_date)
            if fiscal_year > disposal_year:
                raise InvalidFiscalYearError(
                    fiscal_year, f"asset disposed in FY{disposal_year}", asset_id=asset.id
                )

        is_half_year = acquisition_year == fiscal_year
        book_value = asset.book_value

        if is_half_year:
            candidate = asset.depreciable_base * rate * HALF_YEAR_FACTOR
        else:
            candidate = book_value * rate

        amount = max(min(candidate, book_value), ZERO)

        return DepreciationResult(
            asset_id=asset.id,
            fiscal_year=fiscal_year,
            amount=amount,
            is_half_year=is_half_year,
            remaining_book_value=book_value - amount,
        )

    def project_schedule(
        self,
        asset: CapitalAsset,
        start_year: Optional[int] = None,
        years: int = DEFAULT_PROJECTION_YEARS,
    ) -> list[ScheduleRow]:
        """Project successive years, stopping once book value reaches zero.

        ``start_year`` defaults to the acquisition fiscal year. Projection also
        stops after the disposal year.
        """
        year = start_year if start_year is not None else self.fiscal_year_of(asset.acquisition_date)
        current = asset
        rows: list[ScheduleRow] = []

        for _ in range(years):
            if current.disposal_date is not None and year > self.fiscal_year_of(current.disposal_date):
                break
            result = self.compute_year(current, year)
            rows.append(
                ScheduleRow(
                    fiscal_year=year,
                    opening_book_value=current.book_value,
                    amount=result.amount,
                    is_half_year=result.is_half_year,
                    closing_book_value=result.remaining_book_value,
                )
            )
            if result.remaining_book_value == ZERO:
                break
            current = apply_depreciation(current, result.amount)
            year += 1

        logger.debug("Projected %d years for asset %s", len(rows), asset.id)
        return rows
