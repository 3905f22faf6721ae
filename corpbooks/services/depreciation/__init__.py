"""Capital-asset depreciation.

Sub-modules:
- calculator: half-year rule and declining-balance computation
- ledger: SQLAlchemy store of booked entries
- service: booking single years and whole-company runs
"""
from .calculator import DepreciationCalculator, apply_depreciation
from .ledger import SqlAlchemyDepreciationLedger
from .service import DepreciationService

__all__ = [
    "DepreciationCalculator",
    "apply_depreciation",
    "SqlAlchemyDepreciationLedger",
    "DepreciationService",
]
