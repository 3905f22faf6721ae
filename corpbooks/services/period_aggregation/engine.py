"""Period aggregation: fold a company's records for a window into one summary."""
import logging
from decimal import Decimal
from typing import Iterable, Optional

from corpbooks.core.config import settings
from corpbooks.models.fiscal_schemas import (
    CapitalAsset,
    CompanyTaxSettings,
    DateWindow,
    DividendDeclaration,
    PeriodSummary,
    PurchaseTransaction,
    SalesTransaction,
    TaxRemittance,
)
from corpbooks.services.cca_registry import DepreciationClassRegistry
from corpbooks.services.period_aggregation.period_utils import fiscal_year_of
from corpbooks.services.period_aggregation.stages import SUMMARY_STAGES, SummaryInputs, run_stages

logger = logging.getLogger(__name__)


def effective_small_business_rate(company: CompanyTaxSettings) -> Decimal:
    """Company rate, or the configured default when the company has none set."""
    if company.small_business_rate > 0:
        return company.small_business_rate
    return settings.DEFAULT_SMALL_BUSINESS_RATE


def build_inputs(
    company: CompanyTaxSettings,
    window: DateWindow,
    sales: Iterable[SalesTransaction] = (),
    purchases: Iterable[PurchaseTransaction] = (),
    dividends: Iterable[DividendDeclaration] = (),
    assets: Iterable[CapitalAsset] = (),
    tax_remittances: Iterable[TaxRemittance] = (),
    registry: Optional[DepreciationClassRegistry] = None,
    fiscal_year: Optional[int] = None,
) -> SummaryInputs:
    if fiscal_year is None:
        fiscal_year = fiscal_year_of(window.end, company.fiscal_year_end_month, company.fiscal_year_end_day)
    return SummaryInputs(
        company=company,
        window=window,
        fiscal_year=fiscal_year,
        small_business_rate=effective_small_business_rate(company),
        registry=registry if registry is not None else DepreciationClassRegistry.default(),
        settled_statuses=frozenset(s.lower() for s in settings.SETTLED_SALE_STATUSES),
        sales=tuple(sales),
        purchases=tuple(purchases),
        dividends=tuple(dividends),
        assets=tuple(assets),
        tax_remittances=tuple(tax_remittances),
    )


def summarize(
    company: CompanyTaxSettings,
    window: DateWindow,
    sales: Iterable[SalesTransaction] = (),
    purchases: Iterable[PurchaseTransaction] = (),
    dividends: Iterable[DividendDeclaration] = (),
    assets: Iterable[CapitalAsset] = (),
    tax_remittances: Iterable[TaxRemittance] = (),
    registry: Optional[DepreciationClassRegistry] = None,
    fiscal_year: Optional[int] = None,
) -> PeriodSummary:
    """
    Compute the period summary for one company and window.

    Records outside the window are ignored, so callers may pass a superset.
    Per-entity problems (unknown depreciation class, duplicate ledger entry)
    leave that entity out and are listed in ``errors``; the rest of the
    summary is still produced.
    """
    inputs = build_inputs(
        company, window, sales, purchases, dividends, assets, tax_remittances, registry, fiscal_year
    )
    state = run_stages(inputs, SUMMARY_STAGES)

    summary = PeriodSummary(
        company_id=company.company_id,
        window=window,
        fiscal_year=inputs.fiscal_year,
        gross_income=state.gross_income,
        total_expenses=state.total_expenses,
        total_depreciation=state.total_depreciation,
        capital_cost_allowance_estimate=state.capital_cost_allowance_estimate,
        pre_tax_income=state.pre_tax_income,
        income_tax=state.income_tax,
        post_tax_income=state.post_tax_income,
        tax_collected=state.tax_collected,
        tax_paid_as_cost=state.tax_paid_as_cost,
        tax_paid_as_credit=state.tax_paid_as_credit,
        direct_tax_remittances=state.direct_tax_remittances,
        tax_remittance_due=state.tax_remittance_due,
        dividends_paid=state.dividends_paid,
        retained_earnings=state.retained_earnings,
        errors=state.errors,
    )

    for error in summary.errors:
        logger.warning(
            "Summary for company %s skipped %s %s: %s",
            company.company_id, error.entity_type, error.entity_id, error.message,
        )
    logger.info(
        "Period summary for company %s %s..%s: pre-tax %s, retained %s",
        company.company_id, window.start, window.end, summary.pre_tax_income, summary.retained_earnings,
    )
    return summary
