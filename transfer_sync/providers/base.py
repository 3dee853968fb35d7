"""
Provider adapter contract.

One adapter per (chain, provider) pair. Adapters are pure: they build a
provider-native query and map the provider payload into canonical
transfer events. Network I/O is done by ProviderClient.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from transfer_sync.config.constants import Chain, QueryProvider
from transfer_sync.config.sync_jobs import SyncConfig
from transfer_sync.facilitators.types import Facilitator, FacilitatorAddressConfig
from transfer_sync.providers.types import QueryRequest, TransferEventData
from transfer_sync.utils.exceptions import ProviderResponseError


class ProviderAdapter(ABC):
    """
    Abstract base class for provider query adapters.

    Each adapter must:
    1. Implement build_query() - time range (+ offset) to QueryRequest
    2. Implement transform_response() - raw payload to TransferEventData
    """

    chain: Chain
    provider: QueryProvider

    @abstractmethod
    def build_query(
        self,
        config: SyncConfig,
        address_config: FacilitatorAddressConfig,
        since: datetime,
        until: datetime,
        offset: int | None = None,
    ) -> QueryRequest:
        """
        Build a query for transfers sent by the address in [since, until).

        Args:
            config: SyncConfig of the running job
            address_config: Monitored address and its token
            since: Inclusive lower bound
            until: Exclusive upper bound
            offset: Row offset for OFFSET pagination
        """

    @abstractmethod
    def transform_response(
        self,
        data: Any,
        config: SyncConfig,
        facilitator: Facilitator,
        address_config: FacilitatorAddressConfig,
    ) -> list[TransferEventData]:
        """
        Map a provider payload into canonical transfer events.

        Raises:
            ProviderResponseError: If the payload does not have the expected shape
        """

    def _malformed(self, detail: str) -> ProviderResponseError:
        return ProviderResponseError(
            f"Malformed response: {detail}",
            chain=self.chain,
            provider=self.provider,
        )
