"""Database engine setup for the depreciation ledger.

Under ENV=test an in-memory SQLite URL is shared across connections so the
schema created by ``init_db`` is visible to every session.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from corpbooks.core.config import settings
from corpbooks.db.base_class import Base


def _build_engine(url: str):
    if url.startswith("sqlite") and ":memory:" in url:
        return create_engine(
            url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("postgresql"):
        return create_engine(
            url,
            future=True,
            pool_size=5,
            max_overflow=10,
            pool_recycle=3600,  # seconds
            pool_pre_ping=True,
        )
    return create_engine(url, future=True)


engine = _build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


def init_db(bind=None) -> None:
    """Create the ledger tables if they do not exist."""
    from corpbooks.models import ledger_models  # noqa: F401  (registers tables)

    Base.metadata.create_all(bind=bind or engine)
