"""
Adapter registry.

The closed set of supported (chain, provider) pairs. Each chain has a
single provider: the transfer key (chain, tx_hash, log_index) carries no
provider, so two providers on one chain would shadow each other.
"""

from transfer_sync.config.constants import Chain, QueryProvider
from transfer_sync.providers.base import ProviderAdapter
from transfer_sync.providers.bitquery_evm import BitqueryEvmAdapter
from transfer_sync.providers.bitquery_solana import BitquerySolanaAdapter
from transfer_sync.providers.cdp_sql import CdpSqlAdapter
from transfer_sync.utils.exceptions import ConfigurationError

AdapterRegistry = dict[tuple[Chain, QueryProvider], ProviderAdapter]


def build_adapter_registry() -> AdapterRegistry:
    """Instantiate every supported adapter."""
    adapters: list[ProviderAdapter] = [
        BitquerySolanaAdapter(),
        BitqueryEvmAdapter(Chain.POLYGON),
        CdpSqlAdapter(Chain.BASE),
    ]
    return {(adapter.chain, adapter.provider): adapter for adapter in adapters}


def get_adapter(
    adapters: AdapterRegistry,
    chain: Chain,
    provider: QueryProvider,
) -> ProviderAdapter:
    """
    Look up the adapter for a job.

    Raises:
        ConfigurationError: If the pair is not supported
    """
    try:
        return adapters[(Chain(chain), QueryProvider(provider))]
    except (KeyError, ValueError) as e:
        raise ConfigurationError(
            f"No provider adapter for chain={chain} provider={provider}"
        ) from e
