"""
Collaborators the fiscal engine reads from and writes to.

The engine only sees these protocols; storage, transport and caching live
behind them. In-memory implementations are provided for callers that
already hold the records (batch jobs, tests).
"""
from __future__ import annotations

from typing import Iterable, Mapping, Protocol, Sequence

from corpbooks.core.config import settings
from corpbooks.core.exceptions import ConfigurationError
from corpbooks.models.fiscal_schemas import (
    CapitalAsset,
    CompanyTaxSettings,
    DateWindow,
    DepreciationEntry,
    DividendDeclaration,
    EntityId,
    OwnerPayment,
    PurchaseTransaction,
    SalesTransaction,
    TaxRemittance,
)


class TransactionLookup(Protocol):
    """Read-only access to a company's records for a date window.

    Implementations must return every matching record; ordering is not
    required. Assets are returned when acquired on or before the window end,
    with their booked depreciation entries attached.
    """

    def sales(self, company_id: EntityId, window: DateWindow) -> Sequence[SalesTransaction]:
        """Return sales dated inside the window."""

    def purchases(self, company_id: EntityId, window: DateWindow) -> Sequence[PurchaseTransaction]:
        """Return purchases dated inside the window."""

    def dividends(self, company_id: EntityId, window: DateWindow) -> Sequence[DividendDeclaration]:
        """Return dividend declarations declared or paid inside the window."""

    def assets(self, company_id: EntityId, window: DateWindow) -> Sequence[CapitalAsset]:
        """Return assets acquired on or before the window end."""

    def tax_remittances(self, company_id: EntityId, window: DateWindow) -> Sequence[TaxRemittance]:
        """Return direct sales-tax remittances paid inside the window."""

    def owner_payments(self, company_id: EntityId, window: DateWindow) -> Sequence[OwnerPayment]:
        """Return payments to the principal made inside the window."""


class DepreciationLedger(Protocol):
    """Durable, append-only record of booked depreciation years."""

    def exists(self, asset_id: EntityId, fiscal_year: int) -> bool:
        """Return True when the asset already has an entry for the year."""

    def record(self, entry: DepreciationEntry) -> DepreciationEntry:
        """Store the entry exactly once; raise DuplicateDepreciationEntryError otherwise."""


class JurisdictionConfig(Protocol):
    """Company-level tax settings in effect now."""

    def company_settings(self, company_id: EntityId) -> CompanyTaxSettings:
        """Return the company's current rates and registration flag."""


class StaticJurisdictionConfig:
    """Jurisdiction settings held in memory, keyed by company id."""

    def __init__(self, companies: Iterable[CompanyTaxSettings]):
        self._companies: dict[EntityId, CompanyTaxSettings] = {c.company_id: c for c in companies}

    def company_settings(self, company_id: EntityId) -> CompanyTaxSettings:
        try:
            return self._companies[company_id]
        except KeyError:
            raise ConfigurationError("company_settings", f"no tax settings for company {company_id}") from None

    @staticmethod
    def defaults_for(company_id: EntityId, tax_registered: bool = False, **overrides) -> CompanyTaxSettings:
        """Settings built from the configured default rates."""
        data = {
            "company_id": company_id,
            "tax_rate": settings.DEFAULT_TAX_RATE,
            "small_business_rate": settings.DEFAULT_SMALL_BUSINESS_RATE,
            "tax_registered": tax_registered,
        }
        data.update(overrides)
        return CompanyTaxSettings(**data)


class InMemoryTransactionLookup:
    """``TransactionLookup`` over records already loaded, grouped by company."""

    def __init__(
        self,
        sales: Iterable[SalesTransaction] = (),
        purchases: Iterable[PurchaseTransaction] = (),
        dividends: Iterable[DividendDeclaration] = (),
        assets: Iterable[CapitalAsset] = (),
        tax_remittances: Iterable[TaxRemittance] = (),
        owner_payments: Iterable[OwnerPayment] = (),
    ):
        self._sales = list(sales)
        self._purchases = list(purchases)
        self._dividends = list(dividends)
        self._assets = list(assets)
        self._remittances = list(tax_remittances)
        self._owner_payments = list(owner_payments)

    def replace_assets(self, assets: Mapping[EntityId, CapitalAsset]) -> None:
        """Swap in updated copies of assets (e.g. after a depreciation run)."""
        self._assets = [assets.get(a.id, a) for a in self._assets]

    def sales(self, company_id, window):
        return [s for s in self._sales if s.company_id == company_id and window.contains(s.transaction_date)]

    def purchases(self, company_id, window):
        return [p for p in self._purchases if p.company_id == company_id and window.contains(p.transaction_date)]

    def dividends(self, company_id, window):
        return [
            d for d in self._dividends
            if d.company_id == company_id
            and (window.contains(d.declaration_date) or window.contains(d.effective_date))
        ]

    def assets(self, company_id, window):
        return [a for a in self._assets if a.company_id == company_id and a.acquisition_date <= window.end]

    def tax_remittances(self, company_id, window):
        return [r for r in self._remittances if r.company_id == company_id and window.contains(r.payment_date)]

    def owner_payments(self, company_id, window):
        return [p for p in self._owner_payments if p.company_id == company_id and window.contains(p.payment_date)]
