"""Data access layer."""

from transfer_sync.repositories.base import BaseRepository
from transfer_sync.repositories.transfer_event_repository import (
    TransferEventRepository,
)

__all__ = ["BaseRepository", "TransferEventRepository"]
