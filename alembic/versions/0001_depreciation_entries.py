"""add depreciation ledger table

Revision ID: 0001_depreciation_entries
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_depreciation_entries"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:  # noqa: D401
    op.create_table(
        "depreciation_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("asset_id", sa.String(length=64), nullable=False),
        sa.Column("company_id", sa.String(length=64), nullable=True),
        sa.Column("fiscal_year", sa.Integer(), nullable=False),
        sa.Column("depreciation_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("is_half_year", sa.Boolean(), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_depreciation_entries"),
        sa.UniqueConstraint("asset_id", "fiscal_year", name="uq_depreciation_entries_asset_id_fiscal_year"),
    )
    op.create_index("ix_depreciation_entries_asset_id", "depreciation_entries", ["asset_id"])
    op.create_index("ix_depreciation_entries_company_id", "depreciation_entries", ["company_id"])


def downgrade() -> None:  # noqa: D401
    op.drop_index("ix_depreciation_entries_company_id", table_name="depreciation_entries")
    op.drop_index("ix_depreciation_entries_asset_id", table_name="depreciation_entries")
    op.drop_table("depreciation_entries")
