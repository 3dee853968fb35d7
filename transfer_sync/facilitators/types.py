"""Facilitator configuration types."""

from dataclasses import dataclass, field
from datetime import datetime

from transfer_sync.config.constants import Chain


@dataclass(frozen=True)
class Token:
    """Token contract (or mint) and its decimals."""

    address: str
    decimals: int


@dataclass(frozen=True)
class FacilitatorAddressConfig:
    """One monitored (address, token) pair on one chain."""

    address: str
    token: Token
    sync_start_date: datetime | None
    enabled: bool = True


@dataclass(frozen=True)
class Facilitator:
    """A known payment-settlement actor and its addresses per chain."""

    id: str
    name: str
    addresses: dict[Chain, tuple[FacilitatorAddressConfig, ...]] = field(
        default_factory=dict
    )

    def addresses_for(self, chain: Chain) -> tuple[FacilitatorAddressConfig, ...]:
        """All address configurations on a chain (enabled or not)."""
        return self.addresses.get(chain, ())

    def enabled_addresses_for(
        self, chain: Chain
    ) -> tuple[FacilitatorAddressConfig, ...]:
        """Enabled address configurations on a chain."""
        return tuple(a for a in self.addresses_for(chain) if a.enabled)
