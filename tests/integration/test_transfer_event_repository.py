"""Integration tests for the transfer event store."""

from datetime import UTC, datetime, timedelta

import pytest

from transfer_sync.repositories import TransferEventRepository


class TestInsertBatch:
    """Tests for idempotent batch inserts."""

    @pytest.mark.asyncio
    async def test_second_insert_is_noop(self, db_session, make_event):
        repo = TransferEventRepository(db_session)
        events = [make_event(tx_hash=f"0x{i}") for i in range(3)]

        assert await repo.insert_batch(events) == 3
        assert await repo.insert_batch(events) == 0
        assert await repo.count_for("base", "cdp") == 3

    @pytest.mark.asyncio
    async def test_overlapping_batches(self, db_session, make_event):
        """Only rows not stored yet should count as inserted."""
        repo = TransferEventRepository(db_session)
        first, second, third = (make_event(tx_hash=f"0x{i}") for i in range(3))

        await repo.insert_batch([first, second])
        inserted = await repo.insert_batch([second, third])

        assert inserted == 1
        assert await repo.count_for("base", "cdp") == 3

    @pytest.mark.asyncio
    async def test_duplicates_within_batch(self, db_session, make_event):
        repo = TransferEventRepository(db_session)
        event = make_event()

        assert await repo.insert_batch([event, event]) == 1

    @pytest.mark.asyncio
    async def test_dedup_key_is_chain_tx_log(self, db_session, make_event):
        """Same hash with another log index or chain is a different transfer."""
        repo = TransferEventRepository(db_session)

        inserted = await repo.insert_batch(
            [
                make_event(tx_hash="0xaa", log_index=0),
                make_event(tx_hash="0xaa", log_index=1),
                make_event(tx_hash="0xaa", log_index=0, chain="polygon"),
            ]
        )

        assert inserted == 3

    @pytest.mark.asyncio
    async def test_same_key_other_provider_ignored(self, db_session, make_event):
        """Two providers reporting one transfer store it once."""
        repo = TransferEventRepository(db_session)

        await repo.insert_batch([make_event(tx_hash="0xaa", provider="cdp")])
        inserted = await repo.insert_batch([make_event(tx_hash="0xaa", provider="bitquery")])

        assert inserted == 0

    @pytest.mark.asyncio
    async def test_empty_batch(self, db_session):
        assert await TransferEventRepository(db_session).insert_batch([]) == 0

    @pytest.mark.asyncio
    async def test_large_batch_is_chunked(self, db_session, make_event):
        repo = TransferEventRepository(db_session)
        events = [make_event(tx_hash=f"0x{i:x}") for i in range(2500)]

        assert await repo.insert_batch(events) == 2500


class TestGetMostRecent:
    """Tests for the watermark lookup."""

    @pytest.mark.asyncio
    async def test_newest_event(self, db_session, make_event):
        repo = TransferEventRepository(db_session)
        base = datetime(2025, 10, 17, tzinfo=UTC)
        await repo.insert_batch(
            [
                make_event(tx_hash="0x1", block_timestamp=base),
                make_event(tx_hash="0x2", block_timestamp=base + timedelta(hours=2)),
                make_event(tx_hash="0x3", block_timestamp=base + timedelta(hours=1)),
            ]
        )

        latest = await repo.get_most_recent(
            "base", "0x279e08f711182c79ba6d09669127a426228a4653", "cdp"
        )

        assert latest.tx_hash == "0x2"

    @pytest.mark.asyncio
    async def test_filters_by_provider_and_sender(self, db_session, make_event):
        repo = TransferEventRepository(db_session)
        await repo.insert_batch(
            [
                make_event(tx_hash="0x1", provider="bitquery"),
                make_event(tx_hash="0x2", transaction_from="0x" + "9" * 40),
            ]
        )

        latest = await repo.get_most_recent(
            "base", "0x279e08f711182c79ba6d09669127a426228a4653", "cdp"
        )

        assert latest is None
