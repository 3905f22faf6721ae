from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from corpbooks.core.config import settings

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Normalize numeric input to Decimal without binary float artefacts.

    Floats go through ``str`` so that ``0.13`` becomes ``Decimal("0.13")``
    rather than its binary expansion. ``None`` becomes zero.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError("bool is not a monetary value")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"not a decimal value: {value!r}") from exc


def quantize_money(amount: Decimal, quantum: str | None = None) -> Decimal:
    q = Decimal(quantum or settings.MONEY_QUANTUM)
    return amount.quantize(q, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal, symbol: str = "$") -> str:
    q = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if q < 0:
        return f"-{symbol}{-q:,}"
    return f"{symbol}{q:,}"


def format_amount(value: Decimal | None) -> str | None:
    """Format Decimal values without trailing zeros for API responses."""
    if value is None:
        return None

    normalized = value.normalize()
    if normalized == normalized.to_integral():
        normalized = normalized.quantize(Decimal("1"))

    text = format(normalized, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
