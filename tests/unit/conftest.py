"""
Shared fixtures for unit tests.

Sync configurations for each pagination strategy.
"""

from datetime import timedelta

import pytest

from transfer_sync.config.constants import Chain, PaginationStrategy, QueryProvider
from transfer_sync.config.sync_jobs import SyncConfig


@pytest.fixture
def solana_config():
    """Solana/Bitquery OFFSET job."""
    return SyncConfig(
        chain=Chain.SOLANA,
        provider=QueryProvider.BITQUERY,
        pagination_strategy=PaginationStrategy.OFFSET,
        limit=10_000,
        cron="*/10 * * * *",
        max_duration_seconds=600,
    )


@pytest.fixture
def polygon_config():
    """Polygon/Bitquery OFFSET job."""
    return SyncConfig(
        chain=Chain.POLYGON,
        provider=QueryProvider.BITQUERY,
        pagination_strategy=PaginationStrategy.OFFSET,
        limit=5_000,
        cron="0 * * * *",
        max_duration_seconds=300,
    )


@pytest.fixture
def cdp_config():
    """Base/CDP TIME_WINDOW job."""
    return SyncConfig(
        chain=Chain.BASE,
        provider=QueryProvider.CDP,
        pagination_strategy=PaginationStrategy.TIME_WINDOW,
        limit=10_000,
        window=timedelta(days=7),
        cron="*/15 * * * *",
        max_duration_seconds=600,
    )
