"""
Coinbase Developer Platform SQL adapter.

Queries ERC-20 ``Transfer`` logs from the ``<chain>.events`` table. The
warehouse stores raw uint256 values, so amounts need no scaling.
"""

from datetime import datetime
from typing import Any

from transfer_sync.config.constants import ERC20_TRANSFER_SIGNATURE, Chain, QueryProvider
from transfer_sync.config.settings import settings
from transfer_sync.config.sync_jobs import SyncConfig
from transfer_sync.facilitators.types import Facilitator, FacilitatorAddressConfig
from transfer_sync.providers.base import ProviderAdapter
from transfer_sync.providers.types import QueryLanguage, QueryRequest, TransferEventData
from transfer_sync.utils.datetime_utils import format_sql_utc, parse_provider_timestamp
from transfer_sync.utils.validation import validate_evm_address

TRANSFERS_SQL = """
SELECT
    address,
    transaction_from,
    parameters['from']::String AS sender,
    parameters['to']::String AS recipient,
    parameters['value']::UInt256 AS amount,
    block_timestamp,
    transaction_hash AS tx_hash,
    log_index
FROM {table}
WHERE event_signature = '{signature}'
    AND address = '{token}'
    AND transaction_from = '{tx_from}'
    AND block_timestamp >= '{since}'
    AND block_timestamp < '{until}'
ORDER BY block_timestamp ASC, tx_hash ASC, log_index ASC
LIMIT {limit}"""


class CdpSqlAdapter(ProviderAdapter):
    """Base transfers from the CDP SQL API."""

    provider = QueryProvider.CDP

    def __init__(self, chain: Chain = Chain.BASE, api_url: str | None = None) -> None:
        if chain != Chain.BASE:
            raise ValueError(f"CDP SQL adapter does not support {chain}")
        self.chain = chain
        self.table = f"{chain}.events"
        self.api_url = api_url or settings.cdp_sql_url

    def build_query(
        self,
        config: SyncConfig,
        address_config: FacilitatorAddressConfig,
        since: datetime,
        until: datetime,
        offset: int | None = None,
    ) -> QueryRequest:
        tx_from = address_config.address.lower()
        token = address_config.token.address.lower()
        # Values are interpolated into SQL; only hex addresses get this far
        for value in (tx_from, token):
            if not validate_evm_address(value):
                raise ValueError(f"Refusing to build SQL for address {value!r}")

        text = TRANSFERS_SQL.format(
            table=self.table,
            signature=ERC20_TRANSFER_SIGNATURE,
            token=token,
            tx_from=tx_from,
            since=format_sql_utc(since),
            until=format_sql_utc(until),
            limit=int(config.limit),
        )
        if offset:
            text += f"\nOFFSET {int(offset)}"
        return QueryRequest(language=QueryLanguage.SQL, text=text, url=self.api_url)

    def transform_response(
        self,
        data: Any,
        config: SyncConfig,
        facilitator: Facilitator,
        address_config: FacilitatorAddressConfig,
    ) -> list[TransferEventData]:
        try:
            rows = data["result"]
        except (KeyError, TypeError) as e:
            raise self._malformed(f"missing result ({e!r})") from e
        if rows is None:
            return []

        try:
            return [
                TransferEventData(
                    address=row["address"].lower(),
                    transaction_from=row["transaction_from"].lower(),
                    sender=row["sender"].lower(),
                    recipient=row["recipient"].lower(),
                    amount=int(row["amount"]),
                    block_timestamp=parse_provider_timestamp(str(row["block_timestamp"])),
                    tx_hash=row["tx_hash"].lower(),
                    chain=str(config.chain),
                    provider=str(config.provider),
                    decimals=address_config.token.decimals,
                    facilitator_id=facilitator.id,
                    log_index=int(row["log_index"]),
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise self._malformed(f"bad result row ({e!r})") from e
