from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("ENV", "test")

import datetime as dt  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from corpbooks.db import session as db_session_module  # noqa: E402
from corpbooks.db.base_class import Base  # noqa: E402
from corpbooks.db.session import SessionLocal, init_db  # noqa: E402
from corpbooks.models.fiscal_schemas import (  # noqa: E402
    CapitalAsset,
    CompanyTaxSettings,
    PurchaseTransaction,
    SalesTransaction,
)
from corpbooks.services.cca_registry import DepreciationClassRegistry  # noqa: E402


test_engine = create_engine(
    "sqlite:///:memory:",
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
db_session_module.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh ledger schema."""
    Base.metadata.drop_all(bind=test_engine)
    init_db(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    """Provide a database session bound to the in-memory engine."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def registry():
    return DepreciationClassRegistry.default()


@pytest.fixture
def company():
    return CompanyTaxSettings(
        company_id=1,
        name="Maple Consulting Inc.",
        tax_rate="0.13",
        small_business_rate="0.125",
        tax_registered=False,
    )


@pytest.fixture
def asset_factory():
    """Factory for freshly acquired assets (class 10, 30%, by default)."""
    ids = iter(range(1, 10_000))

    def _create(purchase_amount="10000", acquired=dt.date(2023, 3, 15), class_id="10", **overrides):
        overrides.setdefault("id", next(ids))
        overrides.setdefault("company_id", 1)
        description = overrides.pop("description", "Workstation")
        return CapitalAsset.acquire(
            description=description,
            class_id=class_id,
            acquisition_date=acquired,
            purchase_amount=purchase_amount,
            **overrides,
        )

    return _create


@pytest.fixture
def sale_factory():
    def _create(pre_tax, tax="0", on=dt.date(2024, 5, 10), **overrides):
        data = {
            "company_id": 1,
            "pre_tax_amount": Decimal(pre_tax),
            "tax_amount": Decimal(tax),
            "total": Decimal(pre_tax) + Decimal(tax),
            "transaction_date": on,
        }
        data.update(overrides)
        return SalesTransaction(**data)

    return _create


@pytest.fixture
def purchase_factory():
    def _create(pre_tax, tax="0", on=dt.date(2024, 5, 10), **overrides):
        data = {
            "company_id": 1,
            "pre_tax_amount": Decimal(pre_tax),
            "tax_amount": Decimal(tax),
            "total": Decimal(pre_tax) + Decimal(tax),
            "transaction_date": on,
        }
        data.update(overrides)
        return PurchaseTransaction(**data)

    return _create
