"""Custom exception hierarchy for CorpBooks.

Every fiscal-engine failure is a CorpBooksException carrying a stable error
code, so callers composing a multi-record computation can catch the base
class per entity and report it instead of aborting the whole run.

Error codes follow pattern: [CATEGORY][NUMBER]
- TAX: Tax amount/rate errors (300-399)
- SYS: System errors (400-499)
- DEP: Depreciation errors (500-599)
"""

from __future__ import annotations

from typing import Any


class CorpBooksException(Exception):
    """Base exception for all CorpBooks application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with message and metadata.

        Args:
            message: Human readable error message
            code: Unique error code (e.g., "DEP500")
            status_code: HTTP status code a transport layer should use
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# TAX ERRORS (TAX300-399)
# ============================================================================

class TaxError(CorpBooksException):
    """Base class for tax computation errors."""
    pass


class InvalidAmountError(TaxError):
    """A monetary input that must be positive was zero or negative."""

    def __init__(self, amount: Any, field: str = "amount"):
        super().__init__(
            message=f"Invalid {field}: {amount}. A positive amount is required.",
            code="TAX302",
            status_code=400,
            details={"field": field, "amount": str(amount)},
        )


class InvalidRateError(TaxError):
    """A tax rate outside the closed interval [0, 1]."""

    def __init__(self, rate: Any, field: str = "rate"):
        super().__init__(
            message=f"Invalid {field}: {rate}. Rates are fractions between 0 and 1.",
            code="TAX303",
            status_code=400,
            details={"field": field, "rate": str(rate)},
        )


# ============================================================================
# SYSTEM ERRORS (SYS400-499)
# ============================================================================

class SystemError(CorpBooksException):
    """Base class for system/infrastructure errors."""
    pass


class ConfigurationError(SystemError):
    """Application configuration is invalid or missing."""

    def __init__(self, parameter: str, reason: str | None = None):
        message = f"Configuration error: {parameter} is not configured properly"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(
            message=message,
            code="SYS401",
            status_code=500,
            details={"parameter": parameter, "reason": reason},
        )


# ============================================================================
# DEPRECIATION ERRORS (DEP500-599)
# ============================================================================

class DepreciationError(CorpBooksException):
    """Base class for capital-asset depreciation errors."""
    pass


class ClassNotFoundError(DepreciationError):
    """Depreciation class identifier is not in the registry."""

    def __init__(self, class_id: str):
        super().__init__(
            message=f"Depreciation class '{class_id}' not found",
            code="DEP500",
            status_code=404,
            details={"class_id": class_id},
        )


class InvalidFiscalYearError(DepreciationError):
    """Requested fiscal year cannot be depreciated for this asset."""

    def __init__(self, fiscal_year: int, reason: str, asset_id: Any = None):
        super().__init__(
            message=f"Cannot depreciate for fiscal year {fiscal_year}: {reason}",
            code="DEP501",
            status_code=400,
            details={"fiscal_year": fiscal_year, "asset_id": asset_id, "reason": reason},
        )


class DuplicateDepreciationEntryError(DepreciationError):
    """A depreciation entry already exists for this (asset, fiscal year)."""

    def __init__(self, asset_id: Any, fiscal_year: int):
        super().__init__(
            message=f"Depreciation entry already exists for asset {asset_id} in fiscal year {fiscal_year}",
            code="DEP502",
            status_code=409,
            details={"asset_id": asset_id, "fiscal_year": fiscal_year},
        )


class UnsavedAssetError(DepreciationError):
    """Asset has no id yet, so no ledger entry can reference it."""

    def __init__(self, description: str | None = None):
        super().__init__(
            message="Asset must be saved (have an id) before depreciation can be booked",
            code="DEP503",
            status_code=400,
            details={"description": description},
        )
