"""Fiscal Reporting Service.

Entry point for callers that hold collaborators rather than records:
fetches a company's records for a period, runs the aggregation engine
and the supplementary views, and books depreciation runs.
"""
import datetime as dt
import logging
from typing import Optional

from corpbooks.core.config import settings
from corpbooks.core.exceptions import ConfigurationError
from corpbooks.models.fiscal_schemas import (
    CapitalAsset,
    DateWindow,
    DepreciationResult,
    DepreciationRun,
    EntityId,
    PeriodReport,
    ScheduleRow,
)
from corpbooks.services.cca_registry import DepreciationClassRegistry
from corpbooks.services.collaborators import DepreciationLedger, JurisdictionConfig, TransactionLookup
from corpbooks.services.depreciation import DepreciationCalculator, DepreciationService
from corpbooks.services.period_aggregation import (
    asset_register_totals,
    calculate_period_range,
    monthly_tax_breakdown,
    owner_balance,
    summarize,
)

logger = logging.getLogger(__name__)


class FiscalReportingService:
    """Service for period summaries and depreciation runs.

    Responsibilities:
    - Period window resolution (fiscal year, calendar year, month, custom)
    - Period summary with partial results and per-entity errors
    - Monthly tax, owner balance and asset register views
    - Depreciation preview, projection and booking
    """

    def __init__(
        self,
        lookup: TransactionLookup,
        jurisdiction: JurisdictionConfig,
        ledger: Optional[DepreciationLedger] = None,
        registry: Optional[DepreciationClassRegistry] = None,
    ):
        self.lookup = lookup
        self.jurisdiction = jurisdiction
        self.ledger = ledger
        self.registry = registry if registry is not None else DepreciationClassRegistry.default()
        self.calculator = DepreciationCalculator(self.registry)

    def resolve_window(
        self,
        company_id: EntityId,
        period_type: str = "fiscal_year",
        year: Optional[int] = None,
        month: Optional[int] = None,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
    ) -> DateWindow:
        company = self.jurisdiction.company_settings(company_id)
        return calculate_period_range(
            period_type=period_type,
            year=year,
            month=month,
            start=start,
            end=end,
            fiscal_year_end_month=company.fiscal_year_end_month,
            fiscal_year_end_day=company.fiscal_year_end_day,
        )

    def summarize_window(
        self,
        company_id: EntityId,
        window: DateWindow,
        fiscal_year: Optional[int] = None,
    ) -> PeriodReport:
        """Summary plus supplementary views for one window.

        Rates and registration are read from the jurisdiction collaborator
        at call time, so a recomputed report reflects current settings.
        """
        company = self.jurisdiction.company_settings(company_id)
        logger.info(f"Summarizing company {company_id} for {window.start}..{window.end}")

        sales = list(self.lookup.sales(company_id, window))
        purchases = list(self.lookup.purchases(company_id, window))
        dividends = list(self.lookup.dividends(company_id, window))
        assets = list(self.lookup.assets(company_id, window))
        remittances = list(self.lookup.tax_remittances(company_id, window))
        owner_payments = list(self.lookup.owner_payments(company_id, window))

        summary = summarize(
            company,
            window,
            sales=sales,
            purchases=purchases,
            dividends=dividends,
            assets=assets,
            tax_remittances=remittances,
            registry=self.registry,
            fiscal_year=fiscal_year,
        )

        held = [a for a in assets if a.acquisition_date <= window.end and not a.is_disposed_before(window.start)]
        return PeriodReport(
            summary=summary,
            asset_register=asset_register_totals(held),
            owner_balance=owner_balance(window, purchases, assets, owner_payments),
            monthly_breakdown=tuple(
                monthly_tax_breakdown(
                    company, window, sales, purchases, settled_statuses=settings.SETTLED_SALE_STATUSES
                )
            ),
        )

    def summarize_period(
        self,
        company_id: EntityId,
        period_type: str = "fiscal_year",
        year: Optional[int] = None,
        month: Optional[int] = None,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
    ) -> PeriodReport:
        window = self.resolve_window(company_id, period_type, year, month, start, end)
        fiscal_year = year if period_type == "fiscal_year" else None
        return self.summarize_window(company_id, window, fiscal_year=fiscal_year)

    def summarize_fiscal_year(self, company_id: EntityId, fiscal_year: int) -> PeriodReport:
        return self.summarize_period(company_id, "fiscal_year", year=fiscal_year)

    def calculator_for(self, company_id: Optional[EntityId]) -> DepreciationCalculator:
        """Calculator on the company's fiscal year end; calendar years when no company is given."""
        if company_id is None:
            return self.calculator
        company = self.jurisdiction.company_settings(company_id)
        return DepreciationCalculator.for_company(self.registry, company)

    def preview_depreciation(self, asset: CapitalAsset, fiscal_year: int) -> DepreciationResult:
        return self.calculator_for(asset.company_id).compute_year(asset, fiscal_year)

    def project_schedule(self, asset: CapitalAsset, years: int = 10) -> list[ScheduleRow]:
        return self.calculator_for(asset.company_id).project_schedule(asset, years=years)

    def run_depreciation(
        self,
        company_id: EntityId,
        fiscal_year: int,
        entry_date: Optional[dt.date] = None,
    ) -> DepreciationRun:
        """Book ``fiscal_year`` for every asset the company holds that year."""
        if self.ledger is None:
            raise ConfigurationError("depreciation_ledger", "no ledger configured for booking")

        window = self.resolve_window(company_id, "fiscal_year", year=fiscal_year)
        assets = [
            a for a in self.lookup.assets(company_id, window)
            if not a.is_disposed_before(window.start)
        ]
        logger.info(f"Booking FY{fiscal_year} depreciation for {len(assets)} assets of company {company_id}")
        service = DepreciationService(self.ledger, self.calculator_for(company_id))
        return service.run_fiscal_year(
            assets,
            fiscal_year,
            entry_date=entry_date,
            company_id=company_id,
        )
