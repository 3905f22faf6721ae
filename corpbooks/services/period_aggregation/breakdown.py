"""Supplementary views reported next to a period summary."""
from decimal import Decimal
from typing import Iterable

from corpbooks.models.fiscal_schemas import (
    AssetRegisterTotals,
    CapitalAsset,
    CompanyTaxSettings,
    DateWindow,
    MonthlyTaxRow,
    OwnerBalance,
    OwnerPayment,
    PurchaseTransaction,
    SalesTransaction,
)
from corpbooks.services.period_aggregation.period_utils import month_starts
from corpbooks.services.tax_calculator import split_purchase_tax
from corpbooks.utils.currency import ZERO


def monthly_tax_breakdown(
    company: CompanyTaxSettings,
    window: DateWindow,
    sales: Iterable[SalesTransaction],
    purchases: Iterable[PurchaseTransaction],
    settled_statuses: Iterable[str] = ("paid", "settled"),
) -> list[MonthlyTaxRow]:
    """Tax collected, creditable tax paid and net tax for each month of the window.

    ``tax_paid`` holds only creditable purchase tax, so an unregistered
    company shows zero there and its net equals what it collected.
    """
    statuses = {s.lower() for s in settled_statuses}
    collected: dict = {}
    paid: dict = {}

    for sale in sales:
        if sale.status.lower() in statuses and window.contains(sale.transaction_date):
            key = sale.transaction_date.replace(day=1)
            collected[key] = collected.get(key, ZERO) + sale.tax_amount

    for purchase in purchases:
        if window.contains(purchase.transaction_date):
            key = purchase.transaction_date.replace(day=1)
            _, credit = split_purchase_tax(purchase.tax_amount, company.tax_registered)
            paid[key] = paid.get(key, ZERO) + credit

    rows = []
    for month in month_starts(window):
        month_collected = collected.get(month, ZERO)
        month_paid = paid.get(month, ZERO)
        rows.append(
            MonthlyTaxRow(
                month=month,
                tax_collected=month_collected,
                tax_paid=month_paid,
                net_tax=month_collected - month_paid,
            )
        )
    return rows


def owner_balance(
    window: DateWindow,
    purchases: Iterable[PurchaseTransaction],
    assets: Iterable[CapitalAsset],
    owner_payments: Iterable[OwnerPayment],
) -> OwnerBalance:
    """What the company owes its principal for purchases the principal funded.

    Owed: tax-inclusive totals of owner-funded purchases and the total cost
    of owner-funded assets acquired in the window. Settled by payments from
    the company to the principal in the same window.
    """
    owed = sum(
        (p.total for p in purchases if p.paid_by == "owner" and window.contains(p.transaction_date)),
        ZERO,
    )
    owed += sum(
        (a.total_cost for a in assets if a.paid_by == "owner" and window.contains(a.acquisition_date)),
        ZERO,
    )

    by_type: dict[str, Decimal] = {}
    for payment in owner_payments:
        if window.contains(payment.payment_date):
            by_type[payment.payment_type] = by_type.get(payment.payment_type, ZERO) + payment.amount
    paid = sum(by_type.values(), ZERO)

    net = owed - paid
    if net > 0:
        status = "owed_to_owner"
    elif net < 0:
        status = "overpaid"
    else:
        status = "settled"

    return OwnerBalance(
        reimbursement_owed=owed,
        payments_made=paid,
        payments_by_type=by_type,
        net_balance=net,
        status=status,
    )


def asset_register_totals(assets: Iterable[CapitalAsset]) -> AssetRegisterTotals:
    assets = list(assets)
    return AssetRegisterTotals(
        asset_count=len(assets),
        total_cost=sum((a.total_cost for a in assets), ZERO),
        accumulated_depreciation=sum((a.accumulated_depreciation for a in assets), ZERO),
        book_value=sum((a.book_value for a in assets), ZERO),
    )
