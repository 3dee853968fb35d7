"""
Transfer Sync Service.

Scheduled entry point of one chain/provider job: for every facilitator
address, resolve the watermark, drive the provider pagination and persist
each page idempotently.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from transfer_sync.config.sync_jobs import SyncConfig
from transfer_sync.facilitators.registry import FacilitatorRegistry
from transfer_sync.facilitators.types import Facilitator, FacilitatorAddressConfig
from transfer_sync.providers.types import TransferEventData
from transfer_sync.repositories.transfer_event_repository import TransferEventRepository
from transfer_sync.services.pagination import PaginationDriver
from transfer_sync.services.watermark_service import WatermarkResolver
from transfer_sync.utils.datetime_utils import utc_now
from transfer_sync.utils.exceptions import SyncRunError


@dataclass
class AddressSyncResult:
    """Outcome of syncing one facilitator address."""

    facilitator_id: str
    address: str
    since: datetime | None = None
    fetched: int = 0
    saved: int = 0
    error: str | None = None

    @property
    def duplicates(self) -> int:
        return self.fetched - self.saved

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncRunResult:
    """Outcome of one job invocation."""

    job: str
    now: datetime
    addresses: list[AddressSyncResult] = field(default_factory=list)
    skipped: int = 0

    @property
    def total_fetched(self) -> int:
        return sum(a.fetched for a in self.addresses)

    @property
    def total_saved(self) -> int:
        return sum(a.saved for a in self.addresses)

    @property
    def failed(self) -> list[AddressSyncResult]:
        return [a for a in self.addresses if not a.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


class TransferSyncService:
    """
    Orchestrates one sync job.

    Addresses are processed sequentially to stay under provider rate
    limits. Each page is committed before the next one is requested, so
    the watermark never runs ahead of stored data.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: FacilitatorRegistry,
        driver: PaginationDriver,
        persist: bool = True,
    ) -> None:
        """
        Initialize service.

        Args:
            session_factory: Async session maker for the transfer store
            registry: Facilitator registry
            driver: Pagination driver bound to a provider client
            persist: False fetches without writing (dry run)
        """
        self.session_factory = session_factory
        self.registry = registry
        self.driver = driver
        self.persist = persist

    def _facilitators(
        self, config: SyncConfig, facilitator_ids: Iterable[str] | None
    ) -> list[Facilitator]:
        ids = facilitator_ids if facilitator_ids is not None else config.facilitator_ids
        if ids is None:
            return self.registry.facilitators_for_chain(config.chain)
        return [self.registry.get(facilitator_id) for facilitator_id in ids]

    async def run(
        self,
        config: SyncConfig,
        facilitator_ids: Iterable[str] | None = None,
        now: datetime | None = None,
    ) -> SyncRunResult:
        """
        Run the job once.

        Args:
            config: SyncConfig to run
            facilitator_ids: Restrict to these facilitators (split jobs, scripts)
            now: Upper bound of every fetch window (defaults to current time)

        Returns:
            Per-address results

        Raises:
            SyncRunError: If isolation is on and any address failed
            TransferSyncError: First failure when isolation is off
        """
        now = now or utc_now()
        result = SyncRunResult(job=config.job_id, now=now)

        for facilitator in self._facilitators(config, facilitator_ids):
            for address_config in facilitator.addresses_for(config.chain):
                if not address_config.enabled:
                    logger.info(
                        f"{config.log_prefix} Sync is disabled for "
                        f"{facilitator.id}:{address_config.address}"
                    )
                    result.skipped += 1
                    continue

                address_result = AddressSyncResult(
                    facilitator_id=facilitator.id, address=address_config.address
                )
                result.addresses.append(address_result)

                try:
                    await self._sync_address(
                        config, facilitator, address_config, now, address_result
                    )
                except Exception as e:
                    address_result.error = f"{type(e).__name__}: {e}"
                    logger.error(
                        f"{config.log_prefix} Error syncing transfers for "
                        f"{facilitator.id}:{address_config.address}: {e}"
                    )
                    if not config.isolate_address_failures:
                        raise

        logger.info(
            f"{config.log_prefix} Run complete: {len(result.addresses)} addresses, "
            f"{result.total_fetched} fetched, {result.total_saved} saved, "
            f"{len(result.failed)} failed, {result.skipped} disabled"
        )

        if result.failed:
            failed = ", ".join(f"{a.facilitator_id}:{a.address}" for a in result.failed)
            raise SyncRunError(
                f"{config.job_id}: {len(result.failed)} address(es) failed: {failed}",
                result=result,
            )

        return result

    async def _sync_address(
        self,
        config: SyncConfig,
        facilitator: Facilitator,
        address_config: FacilitatorAddressConfig,
        now: datetime,
        address_result: AddressSyncResult,
    ) -> None:
        async with self.session_factory() as session:
            since = await WatermarkResolver(session).resolve_since(
                config.chain, config.provider, address_config
            )
        address_result.since = since

        logger.info(
            f"{config.log_prefix} Syncing {facilitator.id}:{address_config.address} "
            f"from {since.isoformat()} to {now.isoformat()}"
        )

        async def save_page(batch: list[TransferEventData]) -> None:
            address_result.fetched += len(batch)
            if not self.persist:
                logger.info(f"{config.log_prefix} Fetched {len(batch)} transfers (dry run)")
                return
            saved = await self._persist(batch)
            address_result.saved += saved
            logger.info(
                f"{config.log_prefix} Saved {saved} transfers ({len(batch)} fetched, "
                f"{len(batch) - saved} duplicates)"
            )

        summary = await self.driver.drive(
            config, facilitator, address_config, since, now, save_page
        )

        logger.info(
            f"{config.log_prefix} Completed {facilitator.id}:{address_config.address}: "
            f"{address_result.fetched} fetched, {address_result.saved} saved, "
            f"{address_result.duplicates} duplicates in {summary.pages} request(s)"
        )

    async def _persist(self, batch: list[TransferEventData]) -> int:
        async with self.session_factory() as session:
            saved = await TransferEventRepository(session).insert_batch(batch)
            await session.commit()
        return saved
