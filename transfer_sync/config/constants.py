"""
Transfer sync constants.

Centralized constants for chains, providers and job defaults.
"""

from datetime import timedelta
from enum import StrEnum


class Chain(StrEnum):
    """Supported chains."""

    BASE = "base"
    POLYGON = "polygon"
    SOLANA = "solana"


# Chains whose addresses are hex and compared lower-cased
EVM_CHAINS = frozenset({Chain.BASE, Chain.POLYGON})


class QueryProvider(StrEnum):
    """Third-party query providers."""

    BITQUERY = "bitquery"
    CDP = "cdp"


class PaginationStrategy(StrEnum):
    """How a provider is paged over a time range."""

    OFFSET = "offset"
    TIME_WINDOW = "time_window"


# ========================================================================
# TOKENS
# ========================================================================

USDC_DECIMALS = 6

USDC_BASE_ADDRESS = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
USDC_POLYGON_ADDRESS = "0x3c499c542cef5e3811e1192ce70d8cc03d5c3359"
USDC_SOLANA_ADDRESS = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

# ========================================================================
# DURATIONS
# ========================================================================

ONE_MINUTE_IN_SECONDS = 60

# Added to the newest stored block_timestamp to get the next window start
WATERMARK_STEP = timedelta(milliseconds=1)

DEFAULT_TIME_WINDOW = timedelta(days=7)

# ========================================================================
# PROVIDER LIMITS
# ========================================================================

# More than this and bitquery answers 503
BITQUERY_SOLANA_PAGE_LIMIT = 10_000
BITQUERY_EVM_PAGE_LIMIT = 5_000
CDP_WINDOW_ROW_LIMIT = 10_000

# ERC-20 Transfer event signature as stored by CDP
ERC20_TRANSFER_SIGNATURE = "Transfer(address,address,uint256)"

# Distributed lock settings
SYNC_LOCK_PREFIX = "transfer_sync:lock:"
