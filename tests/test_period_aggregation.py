"""Tests for the period aggregation engine."""
import datetime as dt
from decimal import Decimal

import pytest

from corpbooks.models.fiscal_schemas import (
    DateWindow,
    DepreciationEntry,
    DividendDeclaration,
    TaxRemittance,
)
from corpbooks.services.depreciation import apply_depreciation
from corpbooks.services.period_aggregation import (
    SUMMARY_STAGES,
    StageOrderError,
    SummaryState,
    build_inputs,
    run_stages,
    summarize,
)
from corpbooks.services.period_aggregation import stages

FY2024 = DateWindow(start=dt.date(2024, 1, 1), end=dt.date(2024, 12, 31))


def _booked(asset, fiscal_year, amount, entry_date, entry_id=None):
    entry = DepreciationEntry(
        id=entry_id,
        asset_id=asset.id,
        fiscal_year=fiscal_year,
        amount=amount,
        entry_date=entry_date,
    )
    advanced = apply_depreciation(asset, entry.amount)
    return advanced.model_copy(update={"depreciation_entries": asset.depreciation_entries + (entry,)})


def test_sales_scenario(company, sale_factory):
    sales = [
        sale_factory("10000", "0", is_exempt=True),
        sale_factory("5000", "650"),
    ]
    summary = summarize(company, FY2024, sales=sales)
    assert summary.gross_income == Decimal("15000")
    assert summary.tax_collected == Decimal("650")


def test_only_settled_sales_count(company, sale_factory):
    sales = [
        sale_factory("1000", "130", status="paid"),
        sale_factory("2000", "260", status="SETTLED"),
        sale_factory("4000", "520", status="sent"),
        sale_factory("8000", "1040", status="draft"),
    ]
    summary = summarize(company, FY2024, sales=sales)
    assert summary.gross_income == Decimal("3000")
    assert summary.tax_collected == Decimal("390")


def test_window_bounds_are_inclusive(company, sale_factory, purchase_factory):
    sales = [
        sale_factory("100", on=dt.date(2024, 1, 1)),
        sale_factory("200", on=dt.date(2024, 12, 31)),
        sale_factory("400", on=dt.date(2023, 12, 31)),
        sale_factory("800", on=dt.date(2025, 1, 1)),
    ]
    purchases = [purchase_factory("50", on=dt.date(2024, 1, 1)), purchase_factory("70", on=dt.date(2025, 1, 1))]
    summary = summarize(company, FY2024, sales=sales, purchases=purchases)
    assert summary.gross_income == Decimal("300")
    assert summary.total_expenses == Decimal("50")


@pytest.mark.parametrize(
    "registered,as_cost,as_credit",
    [(False, Decimal("130"), Decimal("0")), (True, Decimal("0"), Decimal("130"))],
)
def test_purchase_tax_split_follows_current_registration(company, purchase_factory, registered, as_cost, as_credit):
    purchases = [purchase_factory("1000", "130")]
    current = company.model_copy(update={"tax_registered": registered})
    summary = summarize(current, FY2024, purchases=purchases)
    assert summary.total_expenses == Decimal("1000")
    assert summary.tax_paid_as_cost == as_cost
    assert summary.tax_paid_as_credit == as_credit
    assert summary.tax_paid == Decimal("130")


def test_owner_funded_purchases_are_expenses(company, purchase_factory):
    purchases = [purchase_factory("300", paid_by="owner"), purchase_factory("700", paid_by="corp")]
    assert summarize(company, FY2024, purchases=purchases).total_expenses == Decimal("1000")


def test_loss_yields_zero_income_tax(company, sale_factory, purchase_factory):
    summary = summarize(
        company,
        FY2024,
        sales=[sale_factory("1000")],
        purchases=[purchase_factory("3000")],
    )
    assert summary.pre_tax_income == Decimal("-2000")
    assert summary.income_tax == 0
    assert summary.post_tax_income == Decimal("-2000")


def test_income_tax_uses_small_business_rate(company, sale_factory):
    summary = summarize(company, FY2024, sales=[sale_factory("10000")])
    assert summary.income_tax == Decimal("1250.00")
    assert summary.post_tax_income == Decimal("8750.00")


def test_missing_small_business_rate_falls_back_to_default(company, sale_factory):
    no_rate = company.model_copy(update={"small_business_rate": Decimal("0")})
    summary = summarize(no_rate, FY2024, sales=[sale_factory("10000")])
    assert summary.income_tax == Decimal("1250.00")


def test_depreciation_counts_entries_dated_in_window(company, asset_factory):
    older = asset_factory(purchase_amount="10000", acquired=dt.date(2022, 4, 1))
    older = _booked(older, 2022, "1500", dt.date(2022, 12, 31))
    older = _booked(older, 2023, "2550", dt.date(2023, 12, 31))
    older = _booked(older, 2024, "1785", dt.date(2024, 12, 31))

    summary = summarize(company, FY2024, assets=[older])
    assert summary.total_depreciation == Decimal("1785")


def test_cca_estimate_reported_separately(company, asset_factory, sale_factory):
    held = asset_factory(purchase_amount="10000", acquired=dt.date(2023, 4, 1))
    held = _booked(held, 2024, "2550", dt.date(2024, 12, 31))
    bought_later = asset_factory(purchase_amount="5000", acquired=dt.date(2025, 2, 1))
    disposed_before = asset_factory(
        purchase_amount="4000", acquired=dt.date(2020, 2, 1), disposal_date=dt.date(2023, 6, 1)
    )

    summary = summarize(
        company, FY2024, sales=[sale_factory("20000")], assets=[held, bought_later, disposed_before]
    )
    assert summary.capital_cost_allowance_estimate == Decimal("3000.00")
    assert summary.total_depreciation == Decimal("2550")
    assert summary.pre_tax_income == Decimal("17450")


def test_remittance_only_reduced_by_creditable_tax(company, sale_factory, purchase_factory):
    remittances = [
        TaxRemittance(amount="200", payment_date=dt.date(2024, 4, 30)),
        TaxRemittance(amount="999", payment_date=dt.date(2023, 4, 30)),
    ]
    sales = [sale_factory("10000", "1300")]
    purchases = [purchase_factory("1000", "130")]

    unregistered = summarize(company, FY2024, sales=sales, purchases=purchases, tax_remittances=remittances)
    assert unregistered.direct_tax_remittances == Decimal("200")
    assert unregistered.tax_remittance_due == Decimal("1100")

    registered = summarize(
        company.model_copy(update={"tax_registered": True}),
        FY2024,
        sales=sales,
        purchases=purchases,
        tax_remittances=remittances,
    )
    assert registered.tax_remittance_due == Decimal("970")


def test_only_paid_dividends_reduce_retained_earnings(company, sale_factory):
    dividends = [
        DividendDeclaration(amount="1000", declaration_date=dt.date(2024, 3, 1), status="paid",
                            payment_date=dt.date(2024, 3, 15)),
        DividendDeclaration(amount="5000", declaration_date=dt.date(2024, 6, 1), status="declared"),
        DividendDeclaration(amount="700", declaration_date=dt.date(2023, 12, 1), status="paid",
                            payment_date=dt.date(2024, 1, 10)),
        DividendDeclaration(amount="300", declaration_date=dt.date(2024, 12, 1), status="paid",
                            payment_date=dt.date(2025, 1, 5)),
    ]
    summary = summarize(company, FY2024, sales=[sale_factory("10000")], dividends=dividends)
    assert summary.dividends_paid == Decimal("1700")
    assert summary.retained_earnings == Decimal("8750.00") - Decimal("1700")


@pytest.mark.parametrize(
    "sales,purchases,depreciation",
    [
        (["1234.56", "0.01"], ["999.99"], "123.45"),
        (["100"], ["250.10", "0.33"], "0"),
        (["98765.43"], [], "1777.78"),
    ],
)
def test_accounting_identities_hold_exactly(company, sale_factory, purchase_factory, asset_factory,
                                            sales, purchases, depreciation):
    asset = _booked(asset_factory(acquired=dt.date(2023, 1, 1)), 2024, depreciation, dt.date(2024, 6, 30))
    summary = summarize(
        company,
        FY2024,
        sales=[sale_factory(s) for s in sales],
        purchases=[purchase_factory(p) for p in purchases],
        dividends=[DividendDeclaration(amount="12.34", declaration_date=dt.date(2024, 2, 2), status="paid")],
        assets=[asset],
    )
    assert summary.pre_tax_income == summary.gross_income - summary.total_expenses - summary.total_depreciation
    assert summary.post_tax_income == summary.pre_tax_income - summary.income_tax
    assert summary.retained_earnings == summary.post_tax_income - summary.dividends_paid
    assert summary.income_tax >= 0


def test_same_inputs_same_summary(company, sale_factory, purchase_factory):
    sales = [sale_factory("500", "65"), sale_factory("250", "32.50")]
    purchases = [purchase_factory("80", "10.40")]
    first = summarize(company, FY2024, sales=sales, purchases=purchases)
    second = summarize(company, FY2024, sales=list(reversed(sales)), purchases=purchases)
    assert first == second


def test_unknown_asset_class_is_reported_and_skipped(company, asset_factory, sale_factory):
    good = asset_factory(purchase_amount="1000", acquired=dt.date(2024, 2, 1))
    bad = asset_factory(purchase_amount="1000", acquired=dt.date(2024, 2, 1), class_id="999")

    summary = summarize(company, FY2024, sales=[sale_factory("100")], assets=[good, bad])

    assert summary.capital_cost_allowance_estimate == Decimal("300.00")
    assert summary.gross_income == Decimal("100")
    assert not summary.is_complete
    assert [(e.entity_type, e.entity_id, e.code) for e in summary.errors] == [("capital_asset", bad.id, "DEP500")]


def test_duplicate_ledger_entry_counted_once(company, asset_factory):
    asset = asset_factory(purchase_amount="10000", acquired=dt.date(2023, 1, 1))
    asset = _booked(asset, 2024, "100", dt.date(2024, 12, 31), entry_id=1)
    duplicate = DepreciationEntry(id=2, asset_id=asset.id, fiscal_year=2024, amount="100",
                                  entry_date=dt.date(2024, 12, 31))
    asset = asset.model_copy(update={"depreciation_entries": asset.depreciation_entries + (duplicate,)})

    summary = summarize(company, FY2024, assets=[asset])
    assert summary.total_depreciation == Decimal("100")
    assert summary.errors[0].code == "DEP502"
    assert summary.errors[0].entity_id == 2


def test_duplicate_of_entry_outside_window_is_not_counted(company, asset_factory):
    asset = asset_factory(purchase_amount="10000", acquired=dt.date(2022, 1, 1))
    # FY2023 booked on its year end, then rebooked by mistake in 2024
    asset = _booked(asset, 2023, "3000", dt.date(2023, 12, 31), entry_id=1)
    rebooked = DepreciationEntry(id=2, asset_id=asset.id, fiscal_year=2023, amount="3000",
                                 entry_date=dt.date(2024, 3, 1))
    asset = asset.model_copy(update={"depreciation_entries": asset.depreciation_entries + (rebooked,)})

    summary = summarize(company, FY2024, assets=[asset])
    assert summary.total_depreciation == Decimal("0")
    assert [(e.code, e.entity_id) for e in summary.errors] == [("DEP502", 2)]

    # Neither entry dated in the window: nothing to report
    summary_2022 = summarize(company, DateWindow(start=dt.date(2022, 1, 1), end=dt.date(2022, 12, 31)),
                             assets=[asset])
    assert summary_2022.errors == ()


def test_fiscal_year_derived_from_window_end(company):
    assert summarize(company, FY2024).fiscal_year == 2024
    march_year_end = company.model_copy(update={"fiscal_year_end_month": 3, "fiscal_year_end_day": 31})
    window = DateWindow(start=dt.date(2024, 4, 1), end=dt.date(2024, 9, 30))
    assert summarize(march_year_end, window).fiscal_year == 2025


def test_stage_order_is_fixed():
    assert [s.__name__ for s in SUMMARY_STAGES] == [
        "gross_income",
        "tax_collected",
        "total_expenses",
        "purchase_tax_split",
        "total_depreciation",
        "capital_cost_allowance_estimate",
        "pre_tax_income",
        "income_tax",
        "post_tax_income",
        "tax_remittance_due",
        "dividends_paid",
        "retained_earnings",
    ]


def test_stage_before_prerequisites_raises(company):
    inputs = build_inputs(company, FY2024)
    with pytest.raises(StageOrderError, match="pre_tax_income requires"):
        stages.pre_tax_income(inputs, SummaryState())


def test_run_stages_can_stop_midway(company, sale_factory, purchase_factory):
    inputs = build_inputs(company, FY2024, sales=[sale_factory("900", "117")], purchases=[purchase_factory("100")])
    state = run_stages(inputs, upto="pre_tax_income")
    assert state.pre_tax_income == Decimal("800")
    assert state.income_tax is None
    assert state.retained_earnings is None


def test_engine_does_not_recompute_stored_tax(company, sale_factory):
    # 0.13 of 1000 would be 130; the stored amount wins
    sale = sale_factory("1000", "125")
    assert summarize(company, FY2024, sales=[sale]).tax_collected == Decimal("125")
