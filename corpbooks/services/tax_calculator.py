"""
Transaction Tax Calculator.

Handles:
- Sales/purchase tax from a jurisdiction rate and an exemption flag
- Split of purchase tax into cost vs. creditable input tax
- Explicit re-rating of a stored transaction

A transaction's tax amount is computed once, when the record is created,
and stored. It is never recomputed because a client's exemption or the
company's registration changes later; ``re_rate`` exists for callers that
deliberately want that.
"""
import datetime as dt
import logging
from decimal import Decimal
from typing import Optional, TypeVar

from corpbooks.core.exceptions import InvalidAmountError, InvalidRateError
from corpbooks.models.fiscal_schemas import (
    CompanyTaxSettings,
    PurchaseTransaction,
    SalesTransaction,
    TaxComputation,
    TaxableTransaction,
)
from corpbooks.utils.currency import ZERO, quantize_money, to_decimal

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=TaxableTransaction)


def _validated(pre_tax_amount, jurisdiction_rate) -> tuple[Decimal, Decimal]:
    amount = to_decimal(pre_tax_amount)
    rate = to_decimal(jurisdiction_rate)
    if amount <= 0:
        raise InvalidAmountError(amount, field="pre_tax_amount")
    if rate < 0 or rate > 1:
        raise InvalidRateError(rate, field="jurisdiction_rate")
    return amount, rate


def compute_tax(pre_tax_amount, jurisdiction_rate, is_exempt: bool) -> Decimal:
    """Tax on a pre-tax amount: zero when exempt, else amount * rate (to the cent)."""
    amount, rate = _validated(pre_tax_amount, jurisdiction_rate)
    if is_exempt:
        return quantize_money(ZERO)
    return quantize_money(amount * rate)


def compute_transaction_tax(pre_tax_amount, jurisdiction_rate, is_exempt: bool) -> TaxComputation:
    amount, rate = _validated(pre_tax_amount, jurisdiction_rate)
    tax = compute_tax(amount, rate, is_exempt)
    return TaxComputation(
        pre_tax_amount=amount,
        rate=rate,
        is_exempt=is_exempt,
        tax_amount=tax,
        total=amount + tax,
    )


def split_purchase_tax(tax_paid, is_registered: bool) -> tuple[Decimal, Decimal]:
    """Return ``(tax_as_cost, tax_as_credit)`` for tax paid on a purchase.

    A registered entity recovers the tax as an input tax credit; otherwise
    the tax is simply part of what the purchase cost.
    """
    tax = to_decimal(tax_paid)
    if tax < 0:
        raise InvalidAmountError(tax, field="tax_paid")
    if is_registered:
        return ZERO, tax
    return tax, ZERO


def re_rate(transaction: T, jurisdiction_rate, is_exempt: Optional[bool] = None) -> T:
    """Recompute a stored transaction's tax under a new rate or exemption.

    Returns a new record; the stored one is left untouched.
    """
    exempt = transaction.is_exempt if is_exempt is None else is_exempt
    calc = compute_transaction_tax(transaction.pre_tax_amount, jurisdiction_rate, exempt)
    logger.info(
        "Re-rated %s %s: tax %s -> %s",
        type(transaction).__name__,
        transaction.id,
        transaction.tax_amount,
        calc.tax_amount,
    )
    return transaction.model_copy(
        update={"tax_amount": calc.tax_amount, "total": calc.total, "is_exempt": exempt}
    )


class TransactionTaxCalculator:
    """Builds taxed transaction records under one company's current settings."""

    def __init__(self, company: CompanyTaxSettings):
        self.company = company

    def sale(
        self,
        pre_tax_amount,
        transaction_date: dt.date,
        client_exempt: bool = False,
        **extra,
    ) -> SalesTransaction:
        calc = compute_transaction_tax(pre_tax_amount, self.company.tax_rate, client_exempt)
        return SalesTransaction(
            company_id=self.company.company_id,
            pre_tax_amount=calc.pre_tax_amount,
            tax_amount=calc.tax_amount,
            total=calc.total,
            transaction_date=transaction_date,
            is_exempt=client_exempt,
            **extra,
        )

    def purchase(
        self,
        pre_tax_amount,
        transaction_date: dt.date,
        exempt: bool = False,
        **extra,
    ) -> PurchaseTransaction:
        calc = compute_transaction_tax(pre_tax_amount, self.company.tax_rate, exempt)
        return PurchaseTransaction(
            company_id=self.company.company_id,
            pre_tax_amount=calc.pre_tax_amount,
            tax_amount=calc.tax_amount,
            total=calc.total,
            transaction_date=transaction_date,
            is_exempt=exempt,
            **extra,
        )
