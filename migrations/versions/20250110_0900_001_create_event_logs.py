"""Create event_logs table

Revision ID: 001
Revises:
Create Date: 2025-01-10 09:00:00.000000

Creates the following tables:
- event_logs: Contract events captured by the sync loop
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "event_logs",
        # Primary key
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        # Source
        sa.Column("contract_name", sa.String(64), nullable=False),
        sa.Column("contract_address", sa.String(42), nullable=False),
        sa.Column("event_name", sa.String(128), nullable=True),
        # On-chain position
        sa.Column("tx_hash", sa.String(66), nullable=False),
        sa.Column("log_index", sa.Integer(), nullable=False),
        sa.Column("block_number", sa.BigInteger(), nullable=False),
        sa.Column("block_timestamp", sa.DateTime(timezone=True), nullable=True),
        # Metadata
        sa.Column("duration", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("args", JSONB(), nullable=False, server_default="{}"),
        sa.Column("raw_data", JSONB(), nullable=True),
        # Timestamps
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tx_hash", "log_index", name="uq_event_log"),
    )
    op.create_index("ix_event_logs_contract_name", "event_logs", ["contract_name"])
    op.create_index("ix_event_logs_event_name", "event_logs", ["event_name"])
    op.create_index("ix_event_logs_tx_hash", "event_logs", ["tx_hash"])
    op.create_index("ix_event_logs_block_number", "event_logs", ["block_number"])


def downgrade() -> None:
    op.drop_index("ix_event_logs_block_number", table_name="event_logs")
    op.drop_index("ix_event_logs_tx_hash", table_name="event_logs")
    op.drop_index("ix_event_logs_event_name", table_name="event_logs")
    op.drop_index("ix_event_logs_contract_name", table_name="event_logs")
    op.drop_table("event_logs")
