"""Canonical provider-facing types."""

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class QueryLanguage(StrEnum):
    """Request body flavour a provider expects."""

    GRAPHQL = "graphql"
    SQL = "sql"


@dataclass(frozen=True)
class QueryRequest:
    """A provider-native query ready to send."""

    language: QueryLanguage
    text: str
    url: str


@dataclass(frozen=True)
class TransferEventData:
    """A transfer in the shape persisted to ``transfer_event``."""

    address: str
    transaction_from: str
    sender: str
    recipient: str
    amount: int
    block_timestamp: datetime
    tx_hash: str
    chain: str
    provider: str
    decimals: int
    facilitator_id: str
    log_index: int = 0

    def to_row(self) -> dict[str, Any]:
        """Column mapping for bulk insert."""
        return asdict(self)
