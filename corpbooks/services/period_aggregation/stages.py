"""
Ordered stages of the period summary.

Each stage is a pure function ``(inputs, state) -> state`` that fills in
one figure. Later stages read figures produced by earlier ones, so the
order of ``SUMMARY_STAGES`` is the dependency order; a stage run before
its prerequisites raises ``StageOrderError``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Callable, Optional

from corpbooks.core.exceptions import CorpBooksException, DuplicateDepreciationEntryError
from corpbooks.models.fiscal_schemas import (
    CapitalAsset,
    CompanyTaxSettings,
    DateWindow,
    DividendDeclaration,
    EntityError,
    PurchaseTransaction,
    SalesTransaction,
    TaxRemittance,
)
from corpbooks.services.cca_registry import DepreciationClassRegistry
from corpbooks.services.tax_calculator import split_purchase_tax
from corpbooks.utils.currency import ZERO, quantize_money


class StageOrderError(RuntimeError):
    """A stage ran before a figure it depends on was computed."""


@dataclass(frozen=True)
class SummaryInputs:
    company: CompanyTaxSettings
    window: DateWindow
    fiscal_year: int
    small_business_rate: Decimal
    registry: DepreciationClassRegistry
    settled_statuses: frozenset[str]
    sales: tuple[SalesTransaction, ...] = ()
    purchases: tuple[PurchaseTransaction, ...] = ()
    dividends: tuple[DividendDeclaration, ...] = ()
    assets: tuple[CapitalAsset, ...] = ()
    tax_remittances: tuple[TaxRemittance, ...] = ()


@dataclass(frozen=True)
class SummaryState:
    settled_sales: tuple[SalesTransaction, ...] = ()
    window_purchases: tuple[PurchaseTransaction, ...] = ()
    gross_income: Optional[Decimal] = None
    tax_collected: Optional[Decimal] = None
    total_expenses: Optional[Decimal] = None
    tax_paid_as_cost: Optional[Decimal] = None
    tax_paid_as_credit: Optional[Decimal] = None
    total_depreciation: Optional[Decimal] = None
    capital_cost_allowance_estimate: Optional[Decimal] = None
    pre_tax_income: Optional[Decimal] = None
    income_tax: Optional[Decimal] = None
    post_tax_income: Optional[Decimal] = None
    direct_tax_remittances: Optional[Decimal] = None
    tax_remittance_due: Optional[Decimal] = None
    dividends_paid: Optional[Decimal] = None
    retained_earnings: Optional[Decimal] = None
    errors: tuple[EntityError, ...] = field(default=())


Stage = Callable[[SummaryInputs, SummaryState], SummaryState]


def _require(state: SummaryState, stage: str, *figures: str) -> None:
    missing = [name for name in figures if getattr(state, name) is None]
    if missing:
        raise StageOrderError(f"{stage} requires {', '.join(missing)}")


def gross_income(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    settled = tuple(
        sale for sale in inputs.sales
        if sale.status.lower() in inputs.settled_statuses
        and inputs.window.contains(sale.transaction_date)
    )
    return replace(
        state,
        settled_sales=settled,
        gross_income=sum((s.pre_tax_amount for s in settled), ZERO),
    )


def tax_collected(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    _require(state, "tax_collected", "gross_income")
    return replace(state, tax_collected=sum((s.tax_amount for s in state.settled_sales), ZERO))


def total_expenses(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    purchases = tuple(p for p in inputs.purchases if inputs.window.contains(p.transaction_date))
    return replace(
        state,
        window_purchases=purchases,
        total_expenses=sum((p.pre_tax_amount for p in purchases), ZERO),
    )


def purchase_tax_split(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    """Route purchase tax by the company's registration as of now."""
    _require(state, "purchase_tax_split", "total_expenses")
    as_cost = as_credit = ZERO
    for purchase in state.window_purchases:
        cost, credit = split_purchase_tax(purchase.tax_amount, inputs.company.tax_registered)
        as_cost += cost
        as_credit += credit
    return replace(state, tax_paid_as_cost=as_cost, tax_paid_as_credit=as_credit)


def total_depreciation(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    """Sum booked entries dated in the window, whenever the asset was bought.

    Only the first entry booked for an (asset, fiscal year) counts. A later
    one is reported when either of the pair is dated in the window, even if
    the first lies outside it.
    """
    total = ZERO
    errors = list(state.errors)
    first_in_window: dict[tuple, bool] = {}
    for asset in inputs.assets:
        for entry in asset.depreciation_entries:
            in_window = inputs.window.contains(entry.entry_date)
            key = (str(entry.asset_id), entry.fiscal_year)
            if key in first_in_window:
                if in_window or first_in_window[key]:
                    exc = DuplicateDepreciationEntryError(entry.asset_id, entry.fiscal_year)
                    errors.append(EntityError.from_exception("depreciation_entry", entry.id, exc))
                continue
            first_in_window[key] = in_window
            if in_window:
                total += entry.amount
    return replace(state, total_depreciation=total, errors=tuple(errors))


def capital_cost_allowance_estimate(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    """Full-rate allowance on assets held in the window; reported apart from booked depreciation."""
    estimate = ZERO
    errors = list(state.errors)
    for asset in inputs.assets:
        if asset.acquisition_date > inputs.window.end or asset.is_disposed_before(inputs.window.start):
            continue
        try:
            rate = inputs.registry.rate(asset.class_id)
        except CorpBooksException as exc:
            errors.append(EntityError.from_exception("capital_asset", asset.id, exc))
            continue
        estimate += asset.depreciable_base * rate
    return replace(
        state,
        capital_cost_allowance_estimate=quantize_money(estimate),
        errors=tuple(errors),
    )


def pre_tax_income(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    _require(state, "pre_tax_income", "gross_income", "total_expenses", "total_depreciation")
    return replace(
        state,
        pre_tax_income=state.gross_income - state.total_expenses - state.total_depreciation,
    )


def income_tax(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    """A loss yields zero tax, never a credit."""
    _require(state, "income_tax", "pre_tax_income")
    tax = quantize_money(state.pre_tax_income * inputs.small_business_rate)
    return replace(state, income_tax=max(ZERO, tax))


def post_tax_income(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    _require(state, "post_tax_income", "pre_tax_income", "income_tax")
    return replace(state, post_tax_income=state.pre_tax_income - state.income_tax)


def tax_remittance_due(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    """Only creditable purchase tax offsets collected tax."""
    _require(state, "tax_remittance_due", "tax_collected", "tax_paid_as_credit")
    remitted = sum(
        (r.amount for r in inputs.tax_remittances if inputs.window.contains(r.payment_date)),
        ZERO,
    )
    return replace(
        state,
        direct_tax_remittances=remitted,
        tax_remittance_due=state.tax_collected - state.tax_paid_as_credit - remitted,
    )


def dividends_paid(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    paid = sum(
        (
            d.amount for d in inputs.dividends
            if d.status == "paid" and inputs.window.contains(d.effective_date)
        ),
        ZERO,
    )
    return replace(state, dividends_paid=paid)


def retained_earnings(inputs: SummaryInputs, state: SummaryState) -> SummaryState:
    _require(state, "retained_earnings", "post_tax_income", "dividends_paid")
    return replace(state, retained_earnings=state.post_tax_income - state.dividends_paid)


SUMMARY_STAGES: tuple[Stage, ...] = (
    gross_income,
    tax_collected,
    total_expenses,
    purchase_tax_split,
    total_depreciation,
    capital_cost_allowance_estimate,
    pre_tax_income,
    income_tax,
    post_tax_income,
    tax_remittance_due,
    dividends_paid,
    retained_earnings,
)


def run_stages(
    inputs: SummaryInputs,
    stages: tuple[Stage, ...] = SUMMARY_STAGES,
    upto: Optional[str] = None,
) -> SummaryState:
    """Fold ``stages`` over an empty state; stop after the stage named ``upto``."""
    state = SummaryState()
    for stage in stages:
        state = stage(inputs, state)
        if upto is not None and stage.__name__ == upto:
            break
    return state
