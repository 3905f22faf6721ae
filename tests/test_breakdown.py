"""Tests for the supplementary period views."""
import datetime as dt
from decimal import Decimal

from corpbooks.models.fiscal_schemas import DateWindow, OwnerPayment
from corpbooks.services.period_aggregation import asset_register_totals, monthly_tax_breakdown, owner_balance
from corpbooks.services.depreciation import apply_depreciation

FY2024 = DateWindow(start=dt.date(2024, 1, 1), end=dt.date(2024, 12, 31))


def test_monthly_breakdown_has_every_month(company, sale_factory, purchase_factory):
    registered = company.model_copy(update={"tax_registered": True})
    sales = [
        sale_factory("1000", "130", on=dt.date(2024, 1, 1)),
        sale_factory("500", "65", on=dt.date(2024, 1, 31)),
        sale_factory("900", "117", on=dt.date(2024, 3, 15), status="draft"),
    ]
    purchases = [purchase_factory("200", "26", on=dt.date(2024, 1, 20))]

    rows = monthly_tax_breakdown(registered, FY2024, sales, purchases)

    assert len(rows) == 12
    january = rows[0]
    assert january.month == dt.date(2024, 1, 1)
    assert january.tax_collected == Decimal("195")
    assert january.tax_paid == Decimal("26")
    assert january.net_tax == Decimal("169")
    assert rows[2].tax_collected == 0


def test_monthly_breakdown_unregistered_has_no_credits(company, sale_factory, purchase_factory):
    rows = monthly_tax_breakdown(
        company, FY2024, [sale_factory("1000", "130")], [purchase_factory("200", "26")]
    )
    may = rows[4]
    assert may.tax_paid == 0
    assert may.net_tax == Decimal("130")


def test_owner_balance_owed(purchase_factory, asset_factory):
    purchases = [
        purchase_factory("100", "13", paid_by="owner"),
        purchase_factory("400", "52", paid_by="corp"),
        purchase_factory("50", "6.50", paid_by="owner", on=dt.date(2023, 5, 1)),
    ]
    assets = [asset_factory(purchase_amount="2000", tax_paid="260", acquired=dt.date(2024, 7, 1), paid_by="owner")]
    payments = [
        OwnerPayment(amount="1000", payment_date=dt.date(2024, 8, 1)),
        OwnerPayment(amount="73", payment_date=dt.date(2024, 9, 1), payment_type="other"),
    ]

    balance = owner_balance(FY2024, purchases, assets, payments)

    assert balance.reimbursement_owed == Decimal("2373")
    assert balance.payments_made == Decimal("1073")
    assert balance.payments_by_type == {"reimbursement": Decimal("1000"), "other": Decimal("73")}
    assert balance.net_balance == Decimal("1300")
    assert balance.status == "owed_to_owner"


def test_owner_balance_overpaid_and_settled(purchase_factory):
    purchases = [purchase_factory("100", "13", paid_by="owner")]
    over = owner_balance(FY2024, purchases, [], [OwnerPayment(amount="200", payment_date=dt.date(2024, 6, 1))])
    assert over.status == "overpaid"
    assert over.net_balance == Decimal("-87")

    even = owner_balance(FY2024, purchases, [], [OwnerPayment(amount="113", payment_date=dt.date(2024, 6, 1))])
    assert even.status == "settled"


def test_asset_register_totals(asset_factory):
    first = asset_factory(purchase_amount="10000")
    first = apply_depreciation(first, Decimal("1500"))
    second = asset_factory(purchase_amount="2000", tax_paid="260")

    totals = asset_register_totals([first, second])

    assert totals.asset_count == 2
    assert totals.total_cost == Decimal("12260")
    assert totals.accumulated_depreciation == Decimal("1500")
    assert totals.book_value == Decimal("10760")
    assert asset_register_totals([]).asset_count == 0
