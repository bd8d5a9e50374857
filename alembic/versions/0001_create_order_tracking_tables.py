"""create order_tracking and app_options tables

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the tracking record table and the option table holding the API key."""
    op.create_table(
        "order_tracking",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("order_id", sa.BigInteger(), nullable=False),
        sa.Column("tracking_number", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=100), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("order_total", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False),
        sa.Column("order_items", sa.Text(), nullable=False),
        sa.Column("date_created", sa.DateTime(), nullable=False),
        sa.Column("date_updated", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("order_id"),
        sqlite_autoincrement=True,
    )
    op.create_index(op.f("ix_order_tracking_tracking_number"), "order_tracking", ["tracking_number"], unique=False)
    op.create_index(op.f("ix_order_tracking_customer_email"), "order_tracking", ["customer_email"], unique=False)

    op.create_table(
        "app_options",
        sa.Column("name", sa.String(length=191), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("name"),
    )


def downgrade() -> None:
    """Drop both tables."""
    op.drop_table("app_options")
    op.drop_index(op.f("ix_order_tracking_customer_email"), table_name="order_tracking")
    op.drop_index(op.f("ix_order_tracking_tracking_number"), table_name="order_tracking")
    op.drop_table("order_tracking")
