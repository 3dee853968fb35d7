"""
Watermark resolver.

The resume point of a (chain, address, provider) key is derived from the
stored events themselves: newest block_timestamp + 1 ms, or the address's
configured start date when nothing is stored yet.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from transfer_sync.config.constants import WATERMARK_STEP, Chain
from transfer_sync.facilitators.types import FacilitatorAddressConfig
from transfer_sync.repositories.transfer_event_repository import TransferEventRepository
from transfer_sync.utils.datetime_utils import ensure_utc
from transfer_sync.utils.validation import normalize_address


class WatermarkResolver:
    """Resolves the start of the next fetch window."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize resolver.

        Args:
            session: Database session
        """
        self.session = session
        self.repo = TransferEventRepository(session)

    async def resolve_since(
        self,
        chain: Chain,
        provider: str,
        address_config: FacilitatorAddressConfig,
    ) -> datetime:
        """
        Get the inclusive start of the next window for an address.

        EVM addresses are matched lower-cased, Solana addresses verbatim.
        """
        last_event = await self.repo.get_most_recent(
            chain=str(chain),
            transaction_from=normalize_address(chain, address_config.address),
            provider=str(provider),
        )
        if last_event is None:
            return ensure_utc(address_config.sync_start_date)

        return ensure_utc(last_event.block_timestamp) + WATERMARK_STEP
