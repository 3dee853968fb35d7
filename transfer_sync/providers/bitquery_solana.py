"""
Bitquery Solana adapter (GraphQL v1).

Transfers signed by the facilitator for one SPL mint. Bitquery reports
amounts as decimal strings and exposes no log index, so the index is
derived from the transfer itself (sender, receiver and amount) and stays
the same whichever page or position the transfer is returned at.
"""

import hashlib
import json
from collections import Counter
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

# log_index layout: 23 bits of content hash, 8 bits of occurrence.
# Fits the signed 32-bit log_index column.
OCCURRENCE_BITS = 8
MAX_OCCURRENCE = (1 << OCCURRENCE_BITS) - 1
HASH_MASK = (1 << 23) - 1

TRANSFERS_QUERY = """
{
  solana(network: solana) {
    sent: transfers(
      options: {
        asc: ["block.height", "transaction.signature"], limit: %(limit)d, offset: %(offset)d
      }
      time: {since: %(since)s, before: %(until)s}
      amount: {gt: 0}
      signer: {is: %(signer)s}
      currency: {is: %(currency)s}
    ) {
      block {
        timestamp {
          time
        }
        height
      }
      sender {
        address
      }
      receiver {
        address
      }
      amount
      currency {
        address
        symbol
      }
      transaction {
        feePayer
        signature
      }
    }
  }
}
"""


def transfer_log_index(sender: str, receiver: str, amount: str, occurrence: int = 0) -> int:
    """
    Stable log index of a Solana transfer within its signature.

    Args:
        sender: Source token account owner
        receiver: Destination token account owner
        amount: Amount exactly as reported by Bitquery
        occurrence: How many identical transfers precede this one

    Returns:
        Non-negative index below 2**31

    Raises:
        ValueError: If one signature repeats the same transfer too often
    """
    if occurrence > MAX_OCCURRENCE:
        raise ValueError(f"more than {MAX_OCCURRENCE + 1} identical transfers")
    digest = hashlib.blake2b(
        f"{sender}|{receiver}|{amount}".encode(), digest_size=4
    ).digest()
    content = int.from_bytes(digest, "big") & HASH_MASK
    return (content << OCCURRENCE_BITS) | occurrence


class BitquerySolanaAdapter(ProviderAdapter):
    """Solana transfers from Bitquery's v1 GraphQL API."""

    chain = Chain.SOLANA
    provider = QueryProvider.BITQUERY

    def __init__(self, api_url: str | None = None) -> None:
        self.api_url = api_url or settings.bitquery_api_url

    def build_query(
        self,
        config: SyncConfig,
        address_config: FacilitatorAddressConfig,
        since: datetime,
        until: datetime,
        offset: int | None = None,
    ) -> QueryRequest:
        text = TRANSFERS_QUERY % {
            "limit": config.limit,
            "offset": offset or 0,
            # json.dumps gives GraphQL-compatible quoted strings
            "since": json.dumps(format_iso_utc(since)),
            "until": json.dumps(format_iso_utc(until)),
            "signer": json.dumps(address_config.address),
            "currency": json.dumps(address_config.token.address),
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
            transfers = data["solana"]["sent"]
        except (KeyError, TypeError) as e:
            raise self._malformed(f"missing solana.sent ({e!r})") from e
        if transfers is None:
            return []

        # Occurrences of identical transfers per signature on this page
        seen: Counter[tuple[str, str, str, str]] = Counter()
        events: list[TransferEventData] = []
        try:
            for transfer in transfers:
                signature = transfer["transaction"]["signature"]
                sender = transfer["sender"]["address"]
                receiver = transfer["receiver"]["address"]
                amount = str(transfer["amount"])
                key = (signature, sender, receiver, amount)
                occurrence = seen[key]
                seen[key] += 1

                events.append(
                    TransferEventData(
                        address=transfer["currency"]["address"],
                        transaction_from=address_config.address,
                        sender=sender,
                        recipient=receiver,
                        amount=scale_amount(amount, address_config.token.decimals),
                        block_timestamp=parse_provider_timestamp(
                            transfer["block"]["timestamp"]["time"]
                        ),
                        tx_hash=signature,
                        chain=str(config.chain),
                        provider=str(config.provider),
                        decimals=address_config.token.decimals,
                        facilitator_id=facilitator.id,
                        log_index=transfer_log_index(sender, receiver, amount, occurrence),
                    )
                )
        except (KeyError, TypeError, ValueError) as e:
            raise self._malformed(f"bad transfer row ({e!r})") from e

        return events
