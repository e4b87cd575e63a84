"""Event log model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from vesting_sync.models.base import Base, TimestampMixin


class EventLog(TimestampMixin, Base):
    """One contract event captured from the chain."""

    __tablename__ = "event_logs"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)

    # Source
    contract_name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    contract_address: Mapped[str] = mapped_column(String(42), nullable=False)
    event_name: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True, index=True
    )

    # On-chain position
    tx_hash: Mapped[str] = mapped_column(String(66), nullable=False, index=True)
    log_index: Mapped[int] = mapped_column(Integer, nullable=False)
    block_number: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    block_timestamp: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Per-contract metadata at capture time
    duration: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    args: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict
    )
    raw_data: Mapped[Optional[dict]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("tx_hash", "log_index", name="uq_event_log"),
    )
