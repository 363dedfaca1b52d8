"""create request log tables"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the append-only request log table and its reporting indexes."""
    op.create_table(
        "request_logs",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("request_id", sa.String(length=36), nullable=False),
        sa.Column("server_hostname", sa.String(length=255), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("client_ip", sa.String(length=45), nullable=False),
        sa.UniqueConstraint("request_id", name="uq_request_logs_request_id"),
    )
    op.create_index(
        "idx_timestamp",
        "request_logs",
        [sa.text('"timestamp" DESC')],
    )
    op.create_index("idx_server_hostname", "request_logs", ["server_hostname"])


def downgrade() -> None:
    """Drop the request log table and its indexes."""
    op.drop_index("idx_server_hostname", table_name="request_logs")
    op.drop_index("idx_timestamp", table_name="request_logs")
    op.drop_table("request_logs")
