"""
Provider query adapters.

Per (chain, provider) query builders and response transformers, plus
the HTTP client that executes their queries.
"""

from transfer_sync.providers.base import ProviderAdapter
from transfer_sync.providers.client import ProviderClient
from transfer_sync.providers.registry import build_adapter_registry, get_adapter
from transfer_sync.providers.types import QueryLanguage, QueryRequest, TransferEventData

__all__ = [
    "ProviderAdapter",
    "ProviderClient",
    "QueryLanguage",
    "QueryRequest",
    "TransferEventData",
    "build_adapter_registry",
    "get_adapter",
]
