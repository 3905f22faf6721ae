"""Tests for the transaction tax calculator."""
import datetime as dt
from decimal import Decimal

import pytest

from corpbooks.core.exceptions import InvalidAmountError, InvalidRateError
from corpbooks.services.tax_calculator import (
    TransactionTaxCalculator,
    compute_tax,
    compute_transaction_tax,
    re_rate,
    split_purchase_tax,
)


def test_non_exempt_tax():
    assert compute_tax("5000", "0.13", False) == Decimal("650.00")


def test_exempt_tax_is_zero():
    assert compute_tax("10000", "0.13", True) == Decimal("0")


@pytest.mark.parametrize("amount", ["0.01", "1", "999.99", "12345.67"])
@pytest.mark.parametrize("rate", ["0.05", "0.13", "0.15"])
def test_tax_divided_by_rate_recovers_amount(amount, rate):
    tax = compute_tax(amount, rate, False)
    # within half a cent of rounding, scaled by the rate
    tolerance = Decimal("0.005") / Decimal(rate)
    assert abs(tax / Decimal(rate) - Decimal(amount)) <= tolerance


def test_float_inputs_do_not_drift():
    assert compute_tax(0.1, 0.13, False) == Decimal("0.01")
    calc = compute_transaction_tax(1000.10, 0.13, False)
    assert calc.tax_amount == Decimal("130.01")
    assert calc.total == Decimal("1130.11")


@pytest.mark.parametrize("amount", ["0", "-1", "-0.01"])
def test_non_positive_amount_rejected(amount):
    with pytest.raises(InvalidAmountError) as exc_info:
        compute_tax(amount, "0.13", False)
    assert exc_info.value.code == "TAX302"


@pytest.mark.parametrize("rate", ["-0.01", "1.01"])
def test_rate_outside_unit_interval_rejected(rate):
    with pytest.raises(InvalidRateError):
        compute_tax("100", rate, False)


def test_exempt_still_validates_amount():
    with pytest.raises(InvalidAmountError):
        compute_tax("-5", "0.13", True)


def test_split_purchase_tax_by_registration():
    assert split_purchase_tax(Decimal("130"), is_registered=False) == (Decimal("130"), Decimal("0"))
    assert split_purchase_tax(Decimal("130"), is_registered=True) == (Decimal("0"), Decimal("130"))


def test_calculator_builds_sale_and_purchase(company):
    calc = TransactionTaxCalculator(company)
    sale = calc.sale("5000", dt.date(2024, 2, 1), client_exempt=False, description="Consulting")
    assert sale.tax_amount == Decimal("650.00")
    assert sale.total == Decimal("5650.00")
    assert sale.company_id == company.company_id

    exempt_sale = calc.sale("10000", dt.date(2024, 2, 1), client_exempt=True)
    assert exempt_sale.tax_amount == Decimal("0")
    assert exempt_sale.is_exempt is True

    purchase = calc.purchase("1000", dt.date(2024, 2, 3), paid_by="owner")
    assert purchase.tax_amount == Decimal("130.00")
    assert purchase.paid_by == "owner"


def test_stored_tax_is_not_changed_by_later_setting_changes(company):
    sale = TransactionTaxCalculator(company).sale("1000", dt.date(2024, 1, 5))
    later = company.model_copy(update={"tax_rate": Decimal("0.15")})
    # Building a calculator on new settings does not touch existing records
    TransactionTaxCalculator(later)
    assert sale.tax_amount == Decimal("130.00")


def test_re_rate_returns_new_record(company):
    sale = TransactionTaxCalculator(company).sale("1000", dt.date(2024, 1, 5))
    rerated = re_rate(sale, "0.15")
    assert rerated.tax_amount == Decimal("150.00")
    assert rerated.total == Decimal("1150.00")
    assert sale.tax_amount == Decimal("130.00")

    exempted = re_rate(sale, "0.13", is_exempt=True)
    assert exempted.tax_amount == Decimal("0")
    assert exempted.is_exempt is True
