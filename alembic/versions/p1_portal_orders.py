"""create portal_orders (order lifecycle read model)

Revision ID: p1_portal_orders
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "p1_portal_orders"
down_revision = None
branch_labels = None
depends_on = None


def _is_sqlite(bind) -> bool:
    return (bind.dialect.name or "").lower() == "sqlite"


def upgrade():
    bind = op.get_bind()
    sqlite = _is_sqlite(bind)

    # 读库可能已由 ERP 同步侧建好
    insp = sa.inspect(bind)
    if "portal_orders" in insp.get_table_names():
        return

    def ts(name: str) -> sa.Column:
        return sa.Column(name, sa.TIMESTAMP(timezone=not sqlite), nullable=True)

    op.create_table(
        "portal_orders",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("customer_id", sa.String(64), nullable=False),
        sa.Column("order_number", sa.String(64), nullable=True),
        sa.Column("bill_number", sa.String(64), nullable=True),
        sa.Column("container_number", sa.String(64), nullable=True),
        sa.Column("overall_status", sa.String(32), nullable=True),
        sa.Column("ship_status", sa.String(32), nullable=True),
        sa.Column("customs_status", sa.String(32), nullable=True),
        sa.Column("delivery_status", sa.String(32), nullable=True),
        sa.Column("doc_swap_status", sa.String(32), nullable=True),
        ts("etd"),
        ts("eta"),
        ts("ata"),
        ts("doc_swap_time"),
        ts("customs_release_time"),
        ts("created_at"),
        ts("updated_at"),
        sa.Column("weight", sa.Numeric(14, 3), nullable=True),
        sa.Column("volume", sa.Numeric(14, 3), nullable=True),
        sa.Column("pieces", sa.Integer(), nullable=True),
    )
    op.create_index("ix_portal_orders_customer_id", "portal_orders", ["customer_id"])
    op.create_index(
        "ix_portal_orders_customer_created", "portal_orders", ["customer_id", "created_at"]
    )
    op.create_index(
        "ix_portal_orders_customer_release",
        "portal_orders",
        ["customer_id", "customs_release_time"],
    )


def downgrade():
    op.drop_index("ix_portal_orders_customer_release", table_name="portal_orders")
    op.drop_index("ix_portal_orders_customer_created", table_name="portal_orders")
    op.drop_index("ix_portal_orders_customer_id", table_name="portal_orders")
    op.drop_table("portal_orders")
