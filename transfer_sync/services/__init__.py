"""
Services.

Sync pipeline: pagination, watermark resolution and orchestration.
"""

from transfer_sync.services.pagination import FetchSummary, PaginationDriver
from transfer_sync.services.transfer_sync_service import (
    AddressSyncResult,
    SyncRunResult,
    TransferSyncService,
)
from transfer_sync.services.watermark_service import WatermarkResolver

__all__ = [
    "AddressSyncResult",
    "FetchSummary",
    "PaginationDriver",
    "SyncRunResult",
    "TransferSyncService",
    "WatermarkResolver",
]
