"""
Facilitator registry.

Static configuration of payment facilitators and the addresses
monitored for each of them per chain.
"""

from transfer_sync.facilitators.registry import FacilitatorRegistry, default_registry
from transfer_sync.facilitators.types import (
    Facilitator,
    FacilitatorAddressConfig,
    Token,
)

__all__ = [
    "Facilitator",
    "FacilitatorAddressConfig",
    "FacilitatorRegistry",
    "Token",
    "default_registry",
]
