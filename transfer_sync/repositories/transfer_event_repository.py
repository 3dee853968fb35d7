"""
Transfer Event repository.

Idempotent batch inserts and the watermark lookup.
"""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from transfer_sync.models.transfer_event import TransferEvent
from transfer_sync.providers.types import TransferEventData
from transfer_sync.repositories.base import BaseRepository
from transfer_sync.utils.exceptions import StoreError

# Columns of uq_transfer_event_chain_tx_log
DEDUP_COLUMNS = ("chain", "tx_hash", "log_index")

# Rows per INSERT statement; keeps bind parameters under driver limits
INSERT_CHUNK_SIZE = 1000


class TransferEventRepository(BaseRepository[TransferEvent]):
    """Repository for transfer events."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(TransferEvent, session)

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(TransferEvent)
        if dialect == "sqlite":
            return sqlite_insert(TransferEvent)
        raise StoreError(f"Unsupported database dialect for idempotent insert: {dialect}")

    async def insert_batch(self, events: Sequence[TransferEventData]) -> int:
        """
        Insert events, silently skipping ones already stored.

        Args:
            events: Canonical transfer events

        Returns:
            Number of rows actually inserted (duplicates excluded)

        Raises:
            StoreError: If the database rejects the statement
        """
        if not events:
            return 0

        rows = [event.to_row() for event in events]
        inserted = 0

        try:
            for start in range(0, len(rows), INSERT_CHUNK_SIZE):
                stmt = (
                    self._insert()
                    .values(rows[start : start + INSERT_CHUNK_SIZE])
                    .on_conflict_do_nothing(index_elements=list(DEDUP_COLUMNS))
                    .returning(TransferEvent.id)
                )
                result = await self.session.execute(stmt)
                inserted += len(result.scalars().all())
            await self.session.flush()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to insert {len(rows)} transfer events: {e}") from e

        return inserted

    async def get_most_recent(
        self,
        chain: str,
        transaction_from: str,
        provider: str,
    ) -> TransferEvent | None:
        """
        Get the newest stored event for a (chain, facilitator, provider) key.

        ``transaction_from`` must already be normalized for the chain.

        Raises:
            StoreError: If the query fails
        """
        query = (
            select(TransferEvent)
            .where(
                TransferEvent.chain == chain,
                TransferEvent.transaction_from == transaction_from,
                TransferEvent.provider == provider,
            )
            .order_by(TransferEvent.block_timestamp.desc())
            .limit(1)
        )

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read latest transfer event: {e}") from e
        return result.scalar_one_or_none()

    async def count_for(
        self,
        chain: str,
        provider: str,
        transaction_from: str | None = None,
    ) -> int:
        """Count stored events for a chain/provider, optionally one facilitator."""
        filters = {"chain": chain, "provider": provider}
        if transaction_from is not None:
            filters["transaction_from"] = transaction_from
        return await self.count(**filters)
