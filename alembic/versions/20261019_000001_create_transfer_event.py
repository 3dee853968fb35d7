"""Create transfer_event table.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19

Append-only store of facilitator token transfers. The unique constraint
on (chain, tx_hash, log_index) makes batch inserts idempotent, the
descending watermark index serves the newest-row lookup per facilitator.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create transfer_event table."""
    op.create_table(
        "transfer_event",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        # Token contract (EVM) or mint (Solana)
        sa.Column("address", sa.String(length=64), nullable=False),
        # Parties
        sa.Column("transaction_from", sa.String(length=64), nullable=False),
        sa.Column("sender", sa.String(length=64), nullable=False),
        sa.Column("recipient", sa.String(length=64), nullable=False),
        # Amount in token base units
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("decimals", sa.Integer(), nullable=False),
        # Position on chain
        sa.Column("block_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("tx_hash", sa.String(length=128), nullable=False),
        sa.Column("log_index", sa.Integer(), nullable=False, server_default="0"),
        # Provenance
        sa.Column("chain", sa.String(length=20), nullable=False),
        sa.Column("provider", sa.String(length=20), nullable=False),
        sa.Column("facilitator_id", sa.String(length=64), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "chain", "tx_hash", "log_index", name="uq_transfer_event_chain_tx_log"
        ),
    )

    op.create_index(
        "idx_transfer_event_watermark",
        "transfer_event",
        ["chain", "transaction_from", "provider", sa.text("block_timestamp DESC")],
    )
    op.create_index("ix_transfer_event_sender", "transfer_event", ["sender"])
    op.create_index("ix_transfer_event_recipient", "transfer_event", ["recipient"])
    op.create_index(
        "ix_transfer_event_facilitator_id", "transfer_event", ["facilitator_id"]
    )


def downgrade() -> None:
    """Drop transfer_event table."""
    op.drop_index("ix_transfer_event_facilitator_id", table_name="transfer_event")
    op.drop_index("ix_transfer_event_recipient", table_name="transfer_event")
    op.drop_index("ix_transfer_event_sender", table_name="transfer_event")
    op.drop_index("idx_transfer_event_watermark", table_name="transfer_event")
    op.drop_table("transfer_event")
