"""Period Aggregation Module.

Rolls a company's records for a date window into a single summary.

Sub-modules:
- stages: the ordered, pure summary stages and the pipeline runner
- engine: summarize() entry point
- breakdown: monthly tax, owner balance and asset register views
- period_utils: date windows for fiscal years, months and custom ranges
"""
from .breakdown import asset_register_totals, monthly_tax_breakdown, owner_balance
from .engine import build_inputs, effective_small_business_rate, summarize
from .period_utils import calculate_period_range, fiscal_year_of, fiscal_year_window
from .stages import SUMMARY_STAGES, StageOrderError, SummaryInputs, SummaryState, run_stages

__all__ = [
    # Pipeline
    "SUMMARY_STAGES",
    "StageOrderError",
    "SummaryInputs",
    "SummaryState",
    "run_stages",
    "build_inputs",
    "effective_small_business_rate",
    "summarize",
    # Views
    "asset_register_totals",
    "monthly_tax_breakdown",
    "owner_balance",
    # Periods
    "calculate_period_range",
    "fiscal_year_of",
    "fiscal_year_window",
]
