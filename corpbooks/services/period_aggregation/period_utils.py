"""Period date range calculation utilities.

Provides functions for calculating the inclusive date windows a summary is
computed over: fiscal year, calendar year, month, or an explicit range.
"""
import calendar
from datetime import date, timedelta
from typing import Optional

from corpbooks.models.fiscal_schemas import DateWindow


def _clamped(year: int, month: int, day: int) -> date:
    """``date(year, month, day)`` with the day capped at the month's length."""
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def fiscal_year_end(fiscal_year: int, end_month: int = 12, end_day: int = 31) -> date:
    return _clamped(fiscal_year, end_month, end_day)


def fiscal_year_window(fiscal_year: int, end_month: int = 12, end_day: int = 31) -> DateWindow:
    """Window of the fiscal year that ends in calendar year ``fiscal_year``."""
    end = fiscal_year_end(fiscal_year, end_month, end_day)
    start = fiscal_year_end(fiscal_year - 1, end_month, end_day) + timedelta(days=1)
    return DateWindow(start=start, end=end)


def fiscal_year_of(day: date, end_month: int = 12, end_day: int = 31) -> int:
    """Fiscal year (named by its closing calendar year) that contains ``day``."""
    if day <= fiscal_year_end(day.year, end_month, end_day):
        return day.year
    return day.year + 1


def month_starts(window: DateWindow) -> list[date]:
    """First day of every calendar month touched by the window."""
    months = []
    current = window.start.replace(day=1)
    while current <= window.end:
        months.append(current)
        current = (current.replace(day=28) + timedelta(days=4)).replace(day=1)
    return months


def calculate_period_range(
    period_type: str,
    year: Optional[int] = None,
    month: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    fiscal_year_end_month: int = 12,
    fiscal_year_end_day: int = 31,
) -> DateWindow:
    """Calculate the inclusive window for a given period type.

    Args:
        period_type: 'fiscal_year', 'year', 'month', or 'custom'
        year: Required for 'fiscal_year', 'year' and 'month'
        month: Required for 'month'
        start, end: Required for 'custom'
        fiscal_year_end_month, fiscal_year_end_day: company's year end

    Returns:
        DateWindow with both ends inclusive

    Raises:
        ValueError: If required parameters are missing or invalid
    """
    if period_type == "custom":
        if not start or not end:
            raise ValueError("start and end required for custom periods")
        if start > end:
            raise ValueError(f"Invalid range: {start} is after {end}")
        return DateWindow(start=start, end=end)

    if not year:
        raise ValueError(f"year is required for {period_type} periods")

    if period_type == "fiscal_year":
        try:
            return fiscal_year_window(year, fiscal_year_end_month, fiscal_year_end_day)
        except ValueError as e:
            raise ValueError(
                f"Invalid fiscal year end: {fiscal_year_end_month}-{fiscal_year_end_day}"
            ) from e

    elif period_type == "month":
        if not month:
            raise ValueError("month required for monthly periods")
        try:
            last_day = calendar.monthrange(year, month)[1]
            return DateWindow(start=date(year, month, 1), end=date(year, month, last_day))
        except calendar.IllegalMonthError as e:
            raise ValueError(f"Invalid month: {year}-{month}") from e

    elif period_type == "year":
        return DateWindow(start=date(year, 1, 1), end=date(year, 12, 31))

    else:
        raise ValueError(
            f"Invalid period_type: {period_type}. Must be fiscal_year/year/month/custom"
        )
