"""
Facilitator registry.

Validated, immutable view over the facilitator declarations. Built once
at process start and passed explicitly into the sync service.
"""

from collections.abc import Iterable
from dataclasses import replace

from transfer_sync.config.constants import Chain
from transfer_sync.facilitators.types import Facilitator, FacilitatorAddressConfig
from transfer_sync.utils.datetime_utils import ensure_utc
from transfer_sync.utils.exceptions import ConfigurationError
from transfer_sync.utils.validation import validate_address


class FacilitatorRegistry:
    """
    Registry of facilitators.

    Raises ConfigurationError at construction for:
    - duplicate facilitator ids
    - addresses without a sync start date
    - addresses that are invalid for their chain
    """

    def __init__(self, facilitators: Iterable[Facilitator]) -> None:
        self._facilitators: tuple[Facilitator, ...] = tuple(
            self._validate(f) for f in facilitators
        )

        seen: set[str] = set()
        for facilitator in self._facilitators:
            if facilitator.id in seen:
                raise ConfigurationError(
                    f"Duplicate facilitator id: {facilitator.id}"
                )
            seen.add(facilitator.id)

    @staticmethod
    def _validate(facilitator: Facilitator) -> Facilitator:
        addresses: dict[Chain, tuple[FacilitatorAddressConfig, ...]] = {}

        for chain, configs in facilitator.addresses.items():
            chain = Chain(chain)
            checked = []
            for config in configs:
                if config.sync_start_date is None:
                    raise ConfigurationError(
                        f"Sync start date not found for address {config.address} "
                        f"on chain {chain} ({facilitator.id})"
                    )
                if not validate_address(chain, config.address):
                    raise ConfigurationError(
                        f"Invalid {chain} address {config.address!r} ({facilitator.id})"
                    )
                if not validate_address(chain, config.token.address):
                    raise ConfigurationError(
                        f"Invalid {chain} token address {config.token.address!r} "
                        f"({facilitator.id})"
                    )
                checked.append(
                    replace(config, sync_start_date=ensure_utc(config.sync_start_date))
                )
            addresses[chain] = tuple(checked)

        return replace(facilitator, addresses=addresses)

    def __iter__(self):
        return iter(self._facilitators)

    def __len__(self) -> int:
        return len(self._facilitators)

    @property
    def facilitators(self) -> tuple[Facilitator, ...]:
        """All facilitators in declaration order."""
        return self._facilitators

    def get(self, facilitator_id: str) -> Facilitator:
        """
        Get facilitator by id.

        Raises:
            KeyError: If no facilitator has this id
        """
        for facilitator in self._facilitators:
            if facilitator.id == facilitator_id:
                return facilitator
        raise KeyError(facilitator_id)

    def facilitators_for_chain(self, chain: Chain) -> list[Facilitator]:
        """Facilitators with at least one enabled address on ``chain``."""
        return [f for f in self._facilitators if f.enabled_addresses_for(chain)]


def default_registry() -> FacilitatorRegistry:
    """Build the registry from the static declarations."""
    from transfer_sync.facilitators.config import FACILITATORS

    return FacilitatorRegistry(FACILITATORS)
