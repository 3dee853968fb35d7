"""
Transfer Event model.

Append-only record of one on-chain token transfer sent by a facilitator.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from transfer_sync.models.base import Base


class TransferEvent(Base):
    """
    Transfer event.

    The unique constraint on (chain, tx_hash, log_index) is what makes
    re-fetching an already ingested window harmless: the watermark is
    derived from these rows, so overlapping batches must collapse.
    """

    __tablename__ = "transfer_event"
    __table_args__ = (
        UniqueConstraint(
            "chain", "tx_hash", "log_index", name="uq_transfer_event_chain_tx_log"
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Token contract (EVM) or mint (Solana)
    address: Mapped[str] = mapped_column(String(64), nullable=False)

    # Facilitator that submitted the transaction
    transaction_from: Mapped[str] = mapped_column(String(64), nullable=False)
    sender: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    recipient: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # Token base units (already scaled by decimals)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    decimals: Mapped[int] = mapped_column(Integer, nullable=False)

    block_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    tx_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    log_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    chain: Mapped[str] = mapped_column(String(20), nullable=False)
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    facilitator_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<TransferEvent(chain={self.chain}, tx_hash={self.tx_hash[:16]}..., "
            f"log_index={self.log_index}, amount={self.amount})>"
        )


# Serves the watermark lookup: newest row per (chain, facilitator, provider)
Index(
    "idx_transfer_event_watermark",
    TransferEvent.chain,
    TransferEvent.transaction_from,
    TransferEvent.provider,
    TransferEvent.block_timestamp.desc(),
)
