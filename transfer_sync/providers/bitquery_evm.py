"""
Bitquery EVM adapter (GraphQL v2 streaming API).

Transfers of one ERC-20 token in transactions sent by the facilitator.
Addresses are lower-cased; amounts come as decimal strings.
"""

import json
from datetime import datetime
from typing import Any

from transfer_sync.config.constants import Chain, QueryProvider
from transfer_sync.config.settings import settings
from transfer_sync.config.sync_jobs import SyncConfig
from transfer_sync.facilitators.types import Facilitator, FacilitatorAddressConfig
from transfer_sync.providers.base import ProviderAdapter
from transfer_sync.providers.types import QueryLanguage, QueryRequest, TransferEventData
from transfer_sync.utils.amounts import scale_amount
from transfer_sync.utils.datetime_utils import format_iso_utc, parse_provider_timestamp

# Bitquery network identifiers
NETWORK_NAMES = {
    Chain.POLYGON: "matic",
}

TRANSFERS_QUERY = """
{
  EVM(network: %(network)s, dataset: combined) {
    Transfers(
      limit: {count: %(limit)d, offset: %(offset)d}
      orderBy: [
        {ascending: Block_Time}
        {ascending: Transaction_Hash}
        {ascending: Log_Index}
      ]
      where: {
        Block: {Time: {since: %(since)s, before: %(until)s}}
        Transaction: {From: {is: %(tx_from)s}}
        Transfer: {
          Currency: {SmartContract: {is: %(token)s}}
          Amount: {gt: "0"}
        }
      }
    ) {
      Block {
        Time
        Number
      }
      Transaction {
        Hash
        From
      }
      Log {
        Index
      }
      Transfer {
        Amount
        Sender
        Receiver
        Currency {
          SmartContract
        }
      }
    }
  }
}
"""


class BitqueryEvmAdapter(ProviderAdapter):
    """ERC-20 transfers from Bitquery's v2 GraphQL API."""

    provider = QueryProvider.BITQUERY

    def __init__(self, chain: Chain, api_url: str | None = None) -> None:
        if chain not in NETWORK_NAMES:
            raise ValueError(f"Bitquery EVM adapter does not support {chain}")
        self.chain = chain
        self.network = NETWORK_NAMES[chain]
        self.api_url = api_url or settings.bitquery_streaming_url

    def build_query(
        self,
        config: SyncConfig,
        address_config: FacilitatorAddressConfig,
        since: datetime,
        until: datetime,
        offset: int | None = None,
    ) -> QueryRequest:
        text = TRANSFERS_QUERY % {
            "network": self.network,
            "limit": config.limit,
            "offset": offset or 0,
            "since": json.dumps(format_iso_utc(since)),
            "until": json.dumps(format_iso_utc(until)),
            "tx_from": json.dumps(address_config.address.lower()),
            "token": json.dumps(address_config.token.address.lower()),
        }
        return QueryRequest(language=QueryLanguage.GRAPHQL, text=text, url=self.api_url)

    def transform_response(
        self,
        data: Any,
        config: SyncConfig,
        facilitator: Facilitator,
        address_config: FacilitatorAddressConfig,
    ) -> list[TransferEventData]:
        try:
            rows = data["EVM"]["Transfers"]
        except (KeyError, TypeError) as e:
            raise self._malformed(f"missing EVM.Transfers ({e!r})") from e
        if rows is None:
            return []

        decimals = address_config.token.decimals
        try:
            return [
                TransferEventData(
                    address=row["Transfer"]["Currency"]["SmartContract"].lower(),
                    transaction_from=row["Transaction"]["From"].lower(),
                    sender=row["Transfer"]["Sender"].lower(),
                    recipient=row["Transfer"]["Receiver"].lower(),
                    amount=scale_amount(row["Transfer"]["Amount"], decimals),
                    block_timestamp=parse_provider_timestamp(row["Block"]["Time"]),
                    tx_hash=row["Transaction"]["Hash"].lower(),
                    chain=str(config.chain),
                    provider=str(config.provider),
                    decimals=decimals,
                    facilitator_id=facilitator.id,
                    log_index=int(row["Log"]["Index"]),
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise self._malformed(f"bad transfer row ({e!r})") from e
