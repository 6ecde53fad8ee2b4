"""initial schema

Revision ID: 3f1c9a7d2e10
Revises:
Create Date: 2026-10-17
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "3f1c9a7d2e10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("category", sa.String(16), nullable=False),
        sa.Column("parent_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("balance", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("initial_capital", sa.BigInteger, nullable=True),
        sa.Column("exchange_rate", sa.String(32), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "counterparties",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("credit_term", sa.String(255), nullable=False, server_default=""),
        sa.Column("rebate_period", sa.String(16), nullable=True),
        sa.Column("rebate_rate", sa.String(32), nullable=True),
        sa.Column("settlement_currency", sa.String(8), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "raw_records",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("counterparty_id", sa.Integer, sa.ForeignKey("counterparties.id"), nullable=False),
        sa.Column("sub_entity_id", sa.String(64), nullable=False),
        sa.Column("sub_entity_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("period", sa.String(7), nullable=False),
        sa.Column("amount", sa.BigInteger, nullable=False),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("rebate_amount", sa.BigInteger, nullable=True),
        sa.Column("rebate_rate", sa.String(32), nullable=True),
        sa.Column("paid_amount", sa.BigInteger, nullable=True),
        sa.Column("reference", sa.String(255), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_raw_records_counterparty_period", "raw_records", ["counterparty_id", "period"])

    op.create_table(
        "bills",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("period", sa.String(7), nullable=False),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("counterparty_id", sa.Integer, sa.ForeignKey("counterparties.id"), nullable=False),
        sa.Column("counterparty_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("gross_amount", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("rebate_amount", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("net_amount", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("currency", sa.String(8), nullable=False, server_default=""),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        sa.Column("payment_due_date", sa.String(10), nullable=True),
        sa.Column("rebate_due_date", sa.String(10), nullable=True),
        sa.Column("notes", sa.Text, nullable=False),
        sa.Column("created_by", sa.String(255), nullable=False, server_default=""),
        # NULL once deleted; unique while active.
        sa.Column("active_key", sa.String(64), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_bills_period", "bills", ["period"])

    op.create_table(
        "bill_line_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("bill_id", sa.Integer, sa.ForeignKey("bills.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sub_entity_id", sa.String(64), nullable=False),
        sa.Column("description", sa.String(255), nullable=False, server_default=""),
        sa.Column("gross_amount", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("rebate_amount", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("net_amount", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("record_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "bill_records",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("bill_id", sa.Integer, sa.ForeignKey("bills.id", ondelete="CASCADE"), nullable=False),
        sa.Column("record_id", sa.Integer, sa.ForeignKey("raw_records.id"), nullable=False),
        sa.UniqueConstraint("bill_id", "record_id"),
    )


def downgrade() -> None:
    op.drop_table("bill_records")
    op.drop_table("bill_line_items")
    op.drop_index("ix_bills_period", table_name="bills")
    op.drop_table("bills")
    op.drop_index("ix_raw_records_counterparty_period", table_name="raw_records")
    op.drop_table("raw_records")
    op.drop_table("counterparties")
    op.drop_table("accounts")
