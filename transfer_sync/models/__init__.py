"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from transfer_sync.models.base import Base
from transfer_sync.models.transfer_event import TransferEvent

__all__ = ["Base", "TransferEvent"]
