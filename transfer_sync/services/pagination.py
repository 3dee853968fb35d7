"""
Pagination driver.

Covers a [since, now) range with provider queries, handing every page to
the caller before asking for the next one. No cursor state survives
between pages except (since, until, offset), so a run can be resumed from
whatever was persisted last.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from transfer_sync.config.constants import PaginationStrategy
from transfer_sync.config.sync_jobs import SyncConfig
from transfer_sync.facilitators.types import Facilitator, FacilitatorAddressConfig
from transfer_sync.providers.base import ProviderAdapter
from transfer_sync.providers.registry import AdapterRegistry, get_adapter
from transfer_sync.providers.types import TransferEventData

PageCallback = Callable[[list[TransferEventData]], Awaitable[None]]


@dataclass
class FetchSummary:
    """Totals of one drive() call."""

    total_fetched: int = 0
    pages: int = 0


class PaginationDriver:
    """
    Drives a provider adapter over a time range.

    Strategies:
    - OFFSET: same range, offset += limit until a short page
    - TIME_WINDOW: one query per fixed-size window, oldest first
    """

    def __init__(self, client, adapters: AdapterRegistry) -> None:
        """
        Initialize driver.

        Args:
            client: Object with ``async execute(request, chain, provider)``
            adapters: (chain, provider) -> adapter registry
        """
        self.client = client
        self.adapters = adapters

    async def drive(
        self,
        config: SyncConfig,
        facilitator: Facilitator,
        address_config: FacilitatorAddressConfig,
        since: datetime,
        now: datetime,
        on_page: PageCallback,
    ) -> FetchSummary:
        """
        Fetch every transfer in [since, now) and pass it to ``on_page``.

        Errors from the client, the adapter or ``on_page`` propagate;
        pages already handed over stay handed over.
        """
        adapter = get_adapter(self.adapters, config.chain, config.provider)

        match config.pagination_strategy:
            case PaginationStrategy.OFFSET:
                return await self._drive_offset(
                    adapter, config, facilitator, address_config, since, now, on_page
                )
            case PaginationStrategy.TIME_WINDOW:
                return await self._drive_time_window(
                    adapter, config, facilitator, address_config, since, now, on_page
                )
            case _:
                raise ValueError(
                    f"Unknown pagination strategy: {config.pagination_strategy}"
                )

    async def _fetch(
        self,
        adapter: ProviderAdapter,
        config: SyncConfig,
        facilitator: Facilitator,
        address_config: FacilitatorAddressConfig,
        since: datetime,
        until: datetime,
        offset: int | None,
    ) -> list[TransferEventData]:
        request = adapter.build_query(config, address_config, since, until, offset)
        data = await self.client.execute(request, str(config.chain), str(config.provider))
        return adapter.transform_response(data, config, facilitator, address_config)

    async def _drive_offset(
        self,
        adapter: ProviderAdapter,
        config: SyncConfig,
        facilitator: Facilitator,
        address_config: FacilitatorAddressConfig,
        since: datetime,
        now: datetime,
        on_page: PageCallback,
    ) -> FetchSummary:
        summary = FetchSummary()
        offset = 0

        while True:
            page = await self._fetch(
                adapter, config, facilitator, address_config, since, now, offset
            )
            summary.pages += 1
            summary.total_fetched += len(page)

            logger.debug(
                f"{config.log_prefix} {facilitator.id}: offset {offset} -> {len(page)} rows"
            )

            if page:
                await on_page(page)

            if len(page) < config.limit:
                break
            offset += config.limit

        return summary

    async def _drive_time_window(
        self,
        adapter: ProviderAdapter,
        config: SyncConfig,
        facilitator: Facilitator,
        address_config: FacilitatorAddressConfig,
        since: datetime,
        now: datetime,
        on_page: PageCallback,
    ) -> FetchSummary:
        summary = FetchSummary()

        for window_start, window_end in time_windows(since, now, config.window):
            page = await self._fetch(
                adapter, config, facilitator, address_config, window_start, window_end, None
            )
            summary.pages += 1
            summary.total_fetched += len(page)

            if len(page) >= config.limit:
                logger.warning(
                    f"{config.log_prefix} {facilitator.id}: window "
                    f"{window_start.isoformat()} - {window_end.isoformat()} hit the "
                    f"{config.limit} row cap; results may be truncated"
                )

            if page:
                await on_page(page)

        return summary


def time_windows(since: datetime, now: datetime, window) -> list[tuple[datetime, datetime]]:
    """
    Split [since, now) into consecutive [start, end) windows.

    The last window is truncated at ``now``. Empty when since >= now.
    """
    windows = []
    start = since
    while start < now:
        end = min(start + window, now)
        windows.append((start, end))
        start = end
    return windows
