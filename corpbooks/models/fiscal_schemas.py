"""
Pydantic records consumed and produced by the fiscal engine.

Input records (transactions, assets, declarations) are frozen: a change is
a new record built with ``model_copy(update=...)``. Money is always Decimal;
floats are converted through ``str`` so 0.13 stays 0.13.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from corpbooks.utils.currency import ZERO, to_decimal

Money = Annotated[Decimal, BeforeValidator(to_decimal)]
Rate = Annotated[Decimal, BeforeValidator(to_decimal), Field(ge=0, le=1)]
EntityId = int | str

PaidBy = Literal["corp", "owner"]
DividendStatus = Literal["declared", "paid"]
OwnerPaymentType = Literal["reimbursement", "loan_repayment", "other"]
OwnerBalanceStatus = Literal["owed_to_owner", "overpaid", "settled"]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Depreciation
# ---------------------------------------------------------------------------

class DepreciationClass(_Record):
    """Regulatory depreciation (CCA) class and its annual rate."""
    class_id: str = Field(..., min_length=1)
    rate: Rate
    description: str


class DepreciationEntry(_Record):
    """One booked year of depreciation for one asset (append-only)."""
    id: EntityId | None = None
    asset_id: EntityId
    company_id: EntityId | None = None
    fiscal_year: int
    amount: Money = Field(..., ge=0)
    is_half_year: bool = False
    entry_date: dt.date


class CapitalAsset(_Record):
    """A depreciable purchase and its running depreciation ledger.

    Invariants: ``total_cost == purchase_amount + tax_paid``,
    ``book_value == total_cost - accumulated_depreciation``,
    ``0 <= accumulated_depreciation <= total_cost``.
    """
    id: EntityId | None = None
    company_id: EntityId | None = None
    description: str
    class_id: str
    acquisition_date: dt.date
    purchase_amount: Money = Field(..., gt=0)
    tax_paid: Money = Field(default=ZERO, ge=0)
    total_cost: Money
    depreciable_base: Money = Field(..., ge=0)
    accumulated_depreciation: Money = Field(default=ZERO, ge=0)
    book_value: Money
    paid_by: PaidBy = "corp"
    disposal_date: dt.date | None = None
    disposal_amount: Decimal | None = None
    depreciation_entries: tuple[DepreciationEntry, ...] = ()

    @model_validator(mode="after")
    def _check_ledger_invariants(self) -> CapitalAsset:
        if self.total_cost != self.purchase_amount + self.tax_paid:
            raise ValueError("total_cost must equal purchase_amount + tax_paid")
        if self.accumulated_depreciation > self.total_cost:
            raise ValueError("accumulated_depreciation cannot exceed total_cost")
        if self.book_value != self.total_cost - self.accumulated_depreciation:
            raise ValueError("book_value must equal total_cost - accumulated_depreciation")
        if self.disposal_date and self.disposal_date < self.acquisition_date:
            raise ValueError("disposal_date precedes acquisition_date")
        return self

    @classmethod
    def acquire(
        cls,
        description: str,
        class_id: str,
        acquisition_date: dt.date,
        purchase_amount,
        tax_paid=ZERO,
        **extra,
    ) -> CapitalAsset:
        """Build a freshly purchased asset with its derived ledger fields."""
        purchase = to_decimal(purchase_amount)
        tax = to_decimal(tax_paid)
        total = purchase + tax
        return cls(
            description=description,
            class_id=class_id,
            acquisition_date=acquisition_date,
            purchase_amount=purchase,
            tax_paid=tax,
            total_cost=total,
            depreciable_base=total,
            accumulated_depreciation=ZERO,
            book_value=total,
            **extra,
        )

    def is_disposed_before(self, day: dt.date) -> bool:
        return self.disposal_date is not None and self.disposal_date < day


class DepreciationResult(_Record):
    asset_id: EntityId | None = None
    fiscal_year: int
    amount: Money
    is_half_year: bool
    remaining_book_value: Money


class ScheduleRow(_Record):
    fiscal_year: int
    opening_book_value: Money
    amount: Money
    is_half_year: bool
    closing_book_value: Money


class DepreciationRun(_Record):
    """Outcome of booking one fiscal year across a company's assets."""
    company_id: EntityId | None = None
    fiscal_year: int
    assets_total: int
    entries: tuple[DepreciationEntry, ...] = ()
    updated_assets: tuple[CapitalAsset, ...] = ()
    errors: tuple[EntityError, ...] = ()

    @property
    def assets_processed(self) -> int:
        return len(self.entries)

    @property
    def progress_message(self) -> str:
        return f"{self.assets_processed} of {self.assets_total} assets processed"


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

class TaxComputation(_Record):
    pre_tax_amount: Money
    rate: Rate
    is_exempt: bool
    tax_amount: Money
    total: Money


class TaxableTransaction(_Record):
    id: EntityId | None = None
    company_id: EntityId | None = None
    description: str | None = None
    pre_tax_amount: Money = Field(..., gt=0)
    tax_amount: Money = Field(default=ZERO, ge=0)
    total: Money
    transaction_date: dt.date
    is_exempt: bool = False

    @model_validator(mode="after")
    def _check_total(self):
        if self.total != self.pre_tax_amount + self.tax_amount:
            raise ValueError("total must equal pre_tax_amount + tax_amount")
        return self


class SalesTransaction(TaxableTransaction):
    """Invoice or ad-hoc income. ``is_exempt`` is the counterparty's exemption."""
    kind: Literal["invoice", "income"] = "invoice"
    status: str = "paid"


class PurchaseTransaction(TaxableTransaction):
    """Expense paid by the company or by its principal on its behalf."""
    category: str | None = None
    paid_by: PaidBy = "corp"


class DividendDeclaration(_Record):
    id: EntityId | None = None
    company_id: EntityId | None = None
    amount: Money = Field(..., gt=0)
    declaration_date: dt.date
    payment_date: dt.date | None = None
    status: DividendStatus = "declared"

    @property
    def effective_date(self) -> dt.date:
        """Date a paid dividend left the company (declaration date if unrecorded)."""
        return self.payment_date or self.declaration_date


class TaxRemittance(_Record):
    """Sales-tax payment made directly to the tax authority."""
    id: EntityId | None = None
    company_id: EntityId | None = None
    amount: Money = Field(..., gt=0)
    payment_date: dt.date
    period_start: dt.date | None = None
    period_end: dt.date | None = None
    reference: str | None = None


class OwnerPayment(_Record):
    """Payment from the company to its principal."""
    id: EntityId | None = None
    company_id: EntityId | None = None
    amount: Money = Field(..., gt=0)
    payment_date: dt.date
    payment_type: OwnerPaymentType = "reimbursement"
    description: str | None = None


# ---------------------------------------------------------------------------
# Company settings and periods
# ---------------------------------------------------------------------------

class CompanyTaxSettings(_Record):
    company_id: EntityId
    name: str | None = None
    tax_rate: Rate
    small_business_rate: Rate
    tax_registered: bool = False
    fiscal_year_end_month: int = Field(default=12, ge=1, le=12)
    fiscal_year_end_day: int = Field(default=31, ge=1, le=31)


class DateWindow(_Record):
    """Inclusive date range."""
    start: dt.date
    end: dt.date

    @model_validator(mode="after")
    def _check_order(self) -> DateWindow:
        if self.start > self.end:
            raise ValueError("window start must not be after window end")
        return self

    def contains(self, day: dt.date) -> bool:
        return self.start <= day <= self.end


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

class EntityError(_Record):
    entity_type: str
    entity_id: EntityId | None = None
    code: str
    message: str

    @classmethod
    def from_exception(cls, entity_type: str, entity_id, exc) -> EntityError:
        return cls(
            entity_type=entity_type,
            entity_id=entity_id,
            code=getattr(exc, "code", type(exc).__name__),
            message=getattr(exc, "message", str(exc)),
        )


class PeriodSummary(_Record):
    company_id: EntityId
    window: DateWindow
    fiscal_year: int
    gross_income: Money
    total_expenses: Money
    total_depreciation: Money
    capital_cost_allowance_estimate: Money
    pre_tax_income: Money
    income_tax: Money
    post_tax_income: Money
    tax_collected: Money
    tax_paid_as_cost: Money
    tax_paid_as_credit: Money
    direct_tax_remittances: Money
    tax_remittance_due: Money
    dividends_paid: Money
    retained_earnings: Money
    errors: tuple[EntityError, ...] = ()

    @property
    def tax_paid(self) -> Decimal:
        return self.tax_paid_as_cost + self.tax_paid_as_credit

    @property
    def is_complete(self) -> bool:
        return not self.errors


class MonthlyTaxRow(_Record):
    month: dt.date
    tax_collected: Money
    tax_paid: Money
    net_tax: Money


class OwnerBalance(_Record):
    reimbursement_owed: Money
    payments_made: Money
    payments_by_type: dict[str, Money] = Field(default_factory=dict)
    net_balance: Money
    status: OwnerBalanceStatus


class AssetRegisterTotals(_Record):
    asset_count: int
    total_cost: Money
    accumulated_depreciation: Money
    book_value: Money


class PeriodReport(_Record):
    """Summary plus the supplementary views shown next to it."""
    summary: PeriodSummary
    asset_register: AssetRegisterTotals
    owner_balance: OwnerBalance
    monthly_breakdown: tuple[MonthlyTaxRow, ...] = ()


DepreciationRun.model_rebuild()
