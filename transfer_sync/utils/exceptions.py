"""
Exception hierarchy for transfer sync.

Defines categorized exception types for proper error handling.
"""

import asyncio

import aiohttp


class TransferSyncError(Exception):
    """Base class for all transfer sync errors."""


class ConfigurationError(TransferSyncError):
    """Raised at load time for invalid facilitator or job configuration."""


class FetchError(TransferSyncError):
    """
    Raised when a provider query fails.

    Carries chain/provider context so the orchestrator can log
    which job failed without inspecting the cause.
    """

    def __init__(
        self,
        message: str,
        chain: str | None = None,
        provider: str | None = None,
    ) -> None:
        super().__init__(message)
        self.chain = chain
        self.provider = provider

    def __str__(self) -> str:
        base = super().__str__()
        if self.chain or self.provider:
            return f"[{self.chain}/{self.provider}] {base}"
        return base


class ProviderNetworkError(FetchError):
    """Connection failure or timeout talking to a provider."""


class ProviderHTTPError(FetchError):
    """Provider answered with a non-2xx status."""

    def __init__(
        self,
        status: int,
        body: str = "",
        chain: str | None = None,
        provider: str | None = None,
    ) -> None:
        super().__init__(
            f"HTTP {status}: {body[:200]}", chain=chain, provider=provider
        )
        self.status = status
        self.body = body


class ProviderResponseError(FetchError):
    """Provider payload could not be parsed or reported query errors."""


class StoreError(TransferSyncError):
    """Raised when persisting transfer events fails."""


class SyncRunError(TransferSyncError):
    """
    Raised at the end of a run in which one or more addresses failed.

    The partial result is attached so callers can still report
    what was ingested.
    """

    def __init__(self, message: str, result=None) -> None:
        super().__init__(message)
        self.result = result


# Exception categories based on handling strategy

# Low-level errors the provider client wraps into ProviderNetworkError
NETWORK_ERRORS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ConnectionError,
)

# Worth a scheduler retry - the next run may succeed unchanged
RECOVERABLE_ERRORS = (
    ProviderNetworkError,
    ProviderHTTPError,
    StoreError,
    SyncRunError,
)


def is_recoverable(exc: Exception) -> bool:
    """
    Check if a failed run is worth retrying.

    Args:
        exc: Exception raised by a sync run

    Returns:
        True if a retry may succeed
    """
    if isinstance(exc, ProviderHTTPError) and 400 <= exc.status < 500:
        # Rate limiting is the only client error that goes away by itself
        return exc.status == 429
    return isinstance(exc, RECOVERABLE_ERRORS)
