"""Initial schema — settings, seed_runs and transactions tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "settings",
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("key"),
    )

    op.create_table(
        "seed_runs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("source_url", sa.Text(), nullable=False),
        sa.Column("record_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "transactions",
        sa.Column("generation", sa.Integer(), nullable=False),
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("category", sa.String(length=255), nullable=False),
        sa.Column("sold", sa.Boolean(), nullable=False),
        sa.Column("date_of_sale", sa.DateTime(), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["generation"], ["seed_runs.id"]),
        sa.PrimaryKeyConstraint("generation", "id"),
    )
    op.create_index(
        "ix_transactions_generation_date_of_sale",
        "transactions",
        ["generation", "date_of_sale"],
        unique=False,
    )
    op.create_index(
        "ix_transactions_generation_category",
        "transactions",
        ["generation", "category"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_transactions_generation_category", table_name="transactions")
    op.drop_index("ix_transactions_generation_date_of_sale", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("seed_runs")
    op.drop_table("settings")
