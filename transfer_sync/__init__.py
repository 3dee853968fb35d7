"""
Facilitator transfer sync.

Periodic ingestion of on-chain facilitator transfer events.
"""

__version__ = "0.1.0"
