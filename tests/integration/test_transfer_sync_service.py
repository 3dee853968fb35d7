"""Integration tests for the transfer sync service."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from transfer_sync.config.constants import (
    USDC_BASE_ADDRESS,
    USDC_SOLANA_ADDRESS,
    Chain,
    PaginationStrategy,
    QueryProvider,
)
from transfer_sync.config.sync_jobs import SyncConfig
from transfer_sync.facilitators import Facilitator, FacilitatorRegistry
from transfer_sync.providers import build_adapter_registry
from transfer_sync.repositories import TransferEventRepository
from transfer_sync.services import PaginationDriver, TransferSyncService
from transfer_sync.utils.exceptions import ProviderHTTPError, SyncRunError

START = datetime(2025, 10, 16, tzinfo=UTC)
NOW = START + timedelta(days=10)
FACILITATOR = "0x279e08f711182c79ba6d09669127a426228a4653"


def cdp_config(**overrides) -> SyncConfig:
    values = dict(
        chain=Chain.BASE,
        provider=QueryProvider.CDP,
        pagination_strategy=PaginationStrategy.TIME_WINDOW,
        limit=10_000,
        window=timedelta(days=7),
        cron="*/15 * * * *",
        max_duration_seconds=600,
    )
    values.update(overrides)
    return SyncConfig(**values)


def cdp_row(tx_hash: str, timestamp: str, log_index: int = 0, tx_from: str = FACILITATOR):
    return {
        "address": USDC_BASE_ADDRESS,
        "transaction_from": tx_from,
        "sender": "0x1111111111111111111111111111111111111111",
        "recipient": "0x2222222222222222222222222222222222222222",
        "amount": "2500000",
        "block_timestamp": timestamp,
        "tx_hash": tx_hash,
        "log_index": log_index,
    }


def solana_row(
    signature: str,
    sender: str,
    time: str,
    receiver: str = "MerchantWa11et1111111111111111111111111111",
    amount: str = "0.25",
):
    return {
        "block": {"timestamp": {"time": time}, "height": 1},
        "sender": {"address": sender},
        "receiver": {"address": receiver},
        "amount": amount,
        "currency": {"address": USDC_SOLANA_ADDRESS, "symbol": "USDC"},
        "transaction": {"feePayer": sender, "signature": signature},
    }


def make_service(session_factory, registry, client, persist=True):
    return TransferSyncService(
        session_factory=session_factory,
        registry=registry,
        driver=PaginationDriver(client, build_adapter_registry()),
        persist=persist,
    )


async def stored(session_factory, chain="base", provider="cdp") -> int:
    async with session_factory() as session:
        return await TransferEventRepository(session).count_for(chain, provider)


class TestTimeWindowSync:
    """End-to-end runs of the Base/CDP job."""

    @pytest.mark.asyncio
    async def test_first_run_and_resume(self, session_factory, registry, make_client):
        client = make_client(
            [
                {"result": [cdp_row("0xa1", "2025-10-17 10:00:00.000"),
                            cdp_row("0xa1", "2025-10-17 10:00:00.000", log_index=1)]},
                {"result": [cdp_row("0xb2", "2025-10-24 08:30:00.500")]},
            ],
            default={"result": []},
        )
        service = make_service(session_factory, registry, client)

        result = await service.run(cdp_config(), now=NOW)

        assert result.ok
        assert result.total_fetched == 3
        assert result.total_saved == 3
        assert len(client.requests) == 2
        assert "block_timestamp >= '2025-10-16 00:00:00.000000'" in client.requests[0].text
        assert await stored(session_factory) == 3

        # Second run starts 1 ms after the newest stored transfer
        later = NOW + timedelta(minutes=15)
        result = await service.run(cdp_config(), now=later)

        assert result.total_saved == 0
        assert result.addresses[0].since == datetime(2025, 10, 24, 8, 30, 0, 501000, tzinfo=UTC)
        assert "block_timestamp >= '2025-10-24 08:30:00.501000'" in client.requests[2].text

    @pytest.mark.asyncio
    async def test_refetch_counts_duplicates(self, session_factory, registry, make_client):
        """Overlapping provider answers are stored once."""
        page = {"result": [cdp_row("0xa1", "2025-10-17 10:00:00.000")]}
        client = make_client([page, page], default={"result": []})
        service = make_service(session_factory, registry, client)

        result = await service.run(cdp_config(), now=START + timedelta(days=3))
        assert result.total_saved == 1

        result = await service.run(cdp_config(), now=START + timedelta(days=4))

        assert result.total_fetched == 1
        assert result.total_saved == 0
        assert result.addresses[0].duplicates == 1
        assert await stored(session_factory) == 1

    @pytest.mark.asyncio
    async def test_dry_run_writes_nothing(self, session_factory, registry, make_client):
        client = make_client([{"result": [cdp_row("0xa1", "2025-10-17 10:00:00.000")]}],
                             default={"result": []})
        service = make_service(session_factory, registry, client, persist=False)

        result = await service.run(cdp_config(), now=NOW)

        assert result.total_fetched == 1
        assert result.total_saved == 0
        assert await stored(session_factory) == 0


class TestOffsetSync:
    """End-to-end runs of the Solana/Bitquery job."""

    @pytest.mark.asyncio
    async def test_pages_until_short_page(
        self, session_factory, registry, make_client, solana_address_config
    ):
        config = SyncConfig(
            chain=Chain.SOLANA,
            provider=QueryProvider.BITQUERY,
            pagination_strategy=PaginationStrategy.OFFSET,
            limit=2,
            cron="*/10 * * * *",
            max_duration_seconds=600,
        )
        client = make_client(
            [
                {"solana": {"sent": [
                    solana_row("sig1", "PayerA1111111111111111111111111111111111", "2025-10-17T01:00:00Z"),
                    solana_row("sig2", "PayerB1111111111111111111111111111111111", "2025-10-17T02:00:00Z"),
                ]}},
                {"solana": {"sent": [
                    solana_row("sig3", "PayerC1111111111111111111111111111111111", "2025-10-17T03:00:00Z"),
                ]}},
            ]
        )
        service = make_service(session_factory, registry, client)

        result = await service.run(config, now=NOW)

        assert result.total_saved == 3
        assert "offset: 0" in client.requests[0].text
        assert "offset: 2" in client.requests[1].text
        assert await stored(session_factory, "solana", "bitquery") == 3

        async with session_factory() as session:
            latest = await TransferEventRepository(session).get_most_recent(
                "solana", solana_address_config.address, "bitquery"
            )
        assert latest.tx_hash == "sig3"
        assert latest.amount == 250_000

    @pytest.mark.asyncio
    async def test_signature_split_across_pages(
        self, session_factory, registry, make_client
    ):
        """Transfers of one signature on different pages should all be stored."""
        config = SyncConfig(
            chain=Chain.SOLANA,
            provider=QueryProvider.BITQUERY,
            pagination_strategy=PaginationStrategy.OFFSET,
            limit=1,
            cron="*/10 * * * *",
            max_duration_seconds=600,
        )
        payer = "PayerA1111111111111111111111111111111111"
        client = make_client(
            [
                {"solana": {"sent": [
                    solana_row("SIG1", payer, "2025-10-17T01:00:00Z", "MerchantA", "1.0"),
                ]}},
                {"solana": {"sent": [
                    solana_row("SIG1", payer, "2025-10-17T01:00:00Z", "MerchantB", "2.0"),
                ]}},
                {"solana": {"sent": []}},
            ]
        )
        service = make_service(session_factory, registry, client)

        result = await service.run(config, now=NOW)

        assert len(client.requests) == 3
        assert result.total_fetched == 2
        assert result.total_saved == 2
        assert await stored(session_factory, "solana", "bitquery") == 2

        # A rerun returning both transfers on one page stores nothing new
        rerun = make_service(
            session_factory,
            registry,
            make_client(
                [
                    {"solana": {"sent": [
                        solana_row("SIG1", payer, "2025-10-17T01:00:00Z", "MerchantB", "2.0"),
                        solana_row("SIG1", payer, "2025-10-17T01:00:00Z", "MerchantA", "1.0"),
                    ]}},
                    {"solana": {"sent": []}},
                ]
            ),
        )
        result = await rerun.run(replace(config, limit=2), now=NOW)

        assert result.total_saved == 0
        assert await stored(session_factory, "solana", "bitquery") == 2


class TestFaultIsolation:
    """Per-address failure handling."""

    @pytest.fixture
    def two_facilitators(self, facilitator, base_address_config):
        other = Facilitator(
            id="other",
            name="Other",
            addresses={
                Chain.BASE: (
                    replace(
                        base_address_config,
                        address="0x97316fa4730bc7d3b295234f8e4d04a0a4c093e8",
                    ),
                )
            },
        )
        return FacilitatorRegistry([facilitator, other])

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_other_addresses(
        self, session_factory, two_facilitators, make_client
    ):
        other = "0x97316fa4730bc7d3b295234f8e4d04a0a4c093e8"
        client = make_client(
            [
                ProviderHTTPError(502, "Bad Gateway", chain="base", provider="cdp"),
                {"result": [cdp_row("0xc3", "2025-10-18 00:00:00.000", tx_from=other)]},
            ],
            default={"result": []},
        )
        service = make_service(session_factory, two_facilitators, client)

        with pytest.raises(SyncRunError) as exc_info:
            await service.run(cdp_config(), now=START + timedelta(days=3))

        result = exc_info.value.result
        assert [a.facilitator_id for a in result.failed] == ["daydreams"]
        assert "HTTP 502" in result.failed[0].error
        assert result.total_saved == 1
        assert await stored(session_factory) == 1

    @pytest.mark.asyncio
    async def test_fail_fast_when_isolation_off(
        self, session_factory, two_facilitators, make_client
    ):
        client = make_client(
            [ProviderHTTPError(502, "Bad Gateway", chain="base", provider="cdp")],
            default={"result": []},
        )
        service = make_service(session_factory, two_facilitators, client)

        with pytest.raises(ProviderHTTPError):
            await service.run(
                cdp_config(isolate_address_failures=False), now=START + timedelta(days=3)
            )

        assert len(client.requests) == 1


class TestFacilitatorSelection:
    """Which addresses a run covers."""

    @pytest.mark.asyncio
    async def test_disabled_address_skipped(
        self, session_factory, facilitator, base_address_config, make_client
    ):
        disabled = Facilitator(
            id="disabled",
            name="Disabled",
            addresses={
                Chain.BASE: (
                    replace(
                        base_address_config,
                        address="0x97316fa4730bc7d3b295234f8e4d04a0a4c093e8",
                        enabled=False,
                    ),
                )
            },
        )
        client = make_client(default={"result": []})
        service = make_service(
            session_factory, FacilitatorRegistry([facilitator, disabled]), client
        )

        result = await service.run(
            cdp_config(), facilitator_ids=["daydreams", "disabled"], now=START + timedelta(days=1)
        )

        assert result.skipped == 1
        assert [a.facilitator_id for a in result.addresses] == ["daydreams"]
        assert len(client.requests) == 1

    @pytest.mark.asyncio
    async def test_chain_without_facilitators(self, session_factory, registry, make_client):
        client = make_client()
        service = make_service(session_factory, registry, client)
        config = SyncConfig(
            chain=Chain.POLYGON,
            provider=QueryProvider.BITQUERY,
            pagination_strategy=PaginationStrategy.OFFSET,
            limit=5_000,
            cron="0 * * * *",
            max_duration_seconds=300,
        )

        result = await service.run(config, now=NOW)

        assert result.addresses == []
        assert client.requests == []
