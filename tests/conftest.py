"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from datetime import UTC, datetime
from pathlib import Path

# Minimal environment for Settings; tests never reach real services
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BITQUERY_API_KEY", "test-bitquery-key")
os.environ.setdefault("BITQUERY_V2_TOKEN", "test-bitquery-token")
os.environ.setdefault("CDP_API_TOKEN", "test-cdp-token")
os.environ.setdefault("LOG_FILE", "logs/test_transfer_sync.log")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import dramatiq
from dramatiq.brokers.stub import StubBroker

# Actors bind to the global broker on import
dramatiq.set_broker(StubBroker())

import pytest
from unittest.mock import AsyncMock, MagicMock

from transfer_sync.config.constants import (
    USDC_BASE_ADDRESS,
    USDC_DECIMALS,
    USDC_SOLANA_ADDRESS,
    Chain,
)
from transfer_sync.facilitators import (
    Facilitator,
    FacilitatorAddressConfig,
    FacilitatorRegistry,
    Token,
)

BASE_FACILITATOR_ADDRESS = "0x279e08f711182c79Ba6d09669127a426228a4653"
SOLANA_FACILITATOR_ADDRESS = "DuQ4jFMmVABWGxabYHFkGzdyeJgS1hp4wrRuCtsJgT9a"


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def start_date():
    """Sync start date shared by test facilitators."""
    return datetime(2025, 10, 16, tzinfo=UTC)


@pytest.fixture
def base_address_config(start_date):
    """Mixed-case Base facilitator address watching USDC."""
    return FacilitatorAddressConfig(
        address=BASE_FACILITATOR_ADDRESS,
        token=Token(address=USDC_BASE_ADDRESS, decimals=USDC_DECIMALS),
        sync_start_date=start_date,
    )


@pytest.fixture
def solana_address_config(start_date):
    """Solana facilitator signer watching the USDC mint."""
    return FacilitatorAddressConfig(
        address=SOLANA_FACILITATOR_ADDRESS,
        token=Token(address=USDC_SOLANA_ADDRESS, decimals=USDC_DECIMALS),
        sync_start_date=start_date,
    )


@pytest.fixture
def facilitator(base_address_config, solana_address_config):
    """Facilitator with one address on Base and one on Solana."""
    return Facilitator(
        id="daydreams",
        name="Daydreams",
        addresses={
            Chain.BASE: (base_address_config,),
            Chain.SOLANA: (solana_address_config,),
        },
    )


@pytest.fixture
def registry(facilitator):
    """Registry holding the single test facilitator."""
    return FacilitatorRegistry([facilitator])


class StubProviderClient:
    """
    Provider client returning canned payloads in order.

    Each entry is either a payload or an exception instance to raise.
    Every request is recorded in ``requests``.
    """

    def __init__(self, responses=None, default=None) -> None:
        self.responses = list(responses or [])
        self.default = default
        self.requests = []

    async def execute(self, request, chain: str, provider: str):
        self.requests.append(request)
        response = self.responses.pop(0) if self.responses else self.default
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def make_client():
    """Factory for StubProviderClient."""
    return StubProviderClient


@pytest.fixture
def make_event():
    """Factory for canonical Base transfer events."""
    from transfer_sync.providers.types import TransferEventData

    def _make(
        tx_hash: str = "0xabc",
        log_index: int = 0,
        block_timestamp: datetime | None = None,
        chain: str = "base",
        provider: str = "cdp",
        transaction_from: str = BASE_FACILITATOR_ADDRESS.lower(),
        amount: int = 1_000_000,
    ) -> TransferEventData:
        return TransferEventData(
            address=USDC_BASE_ADDRESS,
            transaction_from=transaction_from,
            sender="0x1111111111111111111111111111111111111111",
            recipient="0x2222222222222222222222222222222222222222",
            amount=amount,
            block_timestamp=block_timestamp or datetime(2025, 10, 17, 12, 0, tzinfo=UTC),
            tx_hash=tx_hash,
            chain=chain,
            provider=provider,
            decimals=USDC_DECIMALS,
            facilitator_id="daydreams",
            log_index=log_index,
        )

    return _make
