"""
Sync job declarations.

One SyncConfig per (chain, provider) job. The scheduler turns each
enabled config into one cron job, or one job per facilitator when
``split_by_facilitator`` is set.
"""

from dataclasses import dataclass, field
from datetime import timedelta

from transfer_sync.config.constants import (
    BITQUERY_EVM_PAGE_LIMIT,
    BITQUERY_SOLANA_PAGE_LIMIT,
    CDP_WINDOW_ROW_LIMIT,
    DEFAULT_TIME_WINDOW,
    ONE_MINUTE_IN_SECONDS,
    Chain,
    PaginationStrategy,
    QueryProvider,
)
from transfer_sync.utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class SyncConfig:
    """A schedulable chain/provider job."""

    chain: Chain
    provider: QueryProvider
    pagination_strategy: PaginationStrategy
    # Page size for OFFSET, per-window row cap for TIME_WINDOW
    limit: int
    cron: str
    max_duration_seconds: int
    # None means every facilitator with an enabled address on the chain
    facilitator_ids: tuple[str, ...] | None = None
    window: timedelta | None = None
    enabled: bool = True
    split_by_facilitator: bool = False
    isolate_address_failures: bool = True

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ConfigurationError(
                f"{self.job_id}: limit must be positive, got {self.limit}"
            )
        if self.max_duration_seconds <= 0:
            raise ConfigurationError(f"{self.job_id}: max duration must be positive")
        if self.pagination_strategy == PaginationStrategy.TIME_WINDOW and (
            self.window is None or self.window <= timedelta(0)
        ):
            raise ConfigurationError(
                f"{self.job_id}: TIME_WINDOW pagination requires a positive window"
            )

    @property
    def job_id(self) -> str:
        """Scheduler id of the whole chain/provider job."""
        return f"{self.chain}-sync-transfers-{self.provider}"

    def facilitator_job_id(self, facilitator_id: str) -> str:
        """Scheduler id of a per-facilitator job."""
        return f"{self.job_id}-{facilitator_id}"

    @property
    def log_prefix(self) -> str:
        return f"[{self.chain}/{self.provider}]"


@dataclass(frozen=True)
class ScheduledJob:
    """A concrete job id bound to its config (and facilitator when split)."""

    job_id: str
    config: SyncConfig
    facilitator_ids: tuple[str, ...] | None = field(default=None)


SYNC_CONFIGS: tuple[SyncConfig, ...] = (
    SyncConfig(
        chain=Chain.SOLANA,
        provider=QueryProvider.BITQUERY,
        pagination_strategy=PaginationStrategy.OFFSET,
        limit=BITQUERY_SOLANA_PAGE_LIMIT,
        cron="*/10 * * * *",
        max_duration_seconds=ONE_MINUTE_IN_SECONDS * 10,
    ),
    SyncConfig(
        chain=Chain.BASE,
        provider=QueryProvider.CDP,
        pagination_strategy=PaginationStrategy.TIME_WINDOW,
        limit=CDP_WINDOW_ROW_LIMIT,
        window=DEFAULT_TIME_WINDOW,
        cron="*/15 * * * *",
        max_duration_seconds=ONE_MINUTE_IN_SECONDS * 10,
    ),
    # The only polygon address (x402rs) is disabled upstream
    SyncConfig(
        chain=Chain.POLYGON,
        provider=QueryProvider.BITQUERY,
        pagination_strategy=PaginationStrategy.OFFSET,
        limit=BITQUERY_EVM_PAGE_LIMIT,
        cron="0 * * * *",
        max_duration_seconds=ONE_MINUTE_IN_SECONDS * 5,
        enabled=False,
    ),
)


def scheduled_jobs(
    configs: tuple[SyncConfig, ...] = SYNC_CONFIGS,
    registry=None,
) -> list[ScheduledJob]:
    """
    Expand enabled configs into concrete scheduler jobs.

    Args:
        configs: Job declarations
        registry: FacilitatorRegistry, required to split per facilitator

    Returns:
        Jobs in declaration order

    Raises:
        ConfigurationError: If two enabled jobs sync the same chain
    """
    jobs: list[ScheduledJob] = []
    providers: dict[Chain, QueryProvider] = {}
    for config in configs:
        if not config.enabled:
            continue
        if config.chain in providers:
            raise ConfigurationError(
                f"{config.job_id}: {config.chain} is already synced from "
                f"{providers[config.chain]}"
            )
        providers[config.chain] = config.provider
        if not config.split_by_facilitator:
            jobs.append(ScheduledJob(job_id=config.job_id, config=config))
            continue

        if registry is None:
            from transfer_sync.facilitators import default_registry

            registry = default_registry()
        ids = config.facilitator_ids or tuple(
            f.id for f in registry.facilitators_for_chain(config.chain)
        )
        for facilitator_id in ids:
            jobs.append(
                ScheduledJob(
                    job_id=config.facilitator_job_id(facilitator_id),
                    config=config,
                    facilitator_ids=(facilitator_id,),
                )
            )
    return jobs


def find_job(
    job_id: str,
    configs: tuple[SyncConfig, ...] = SYNC_CONFIGS,
    registry=None,
) -> ScheduledJob:
    """
    Look up a scheduled job by id.

    Raises:
        ConfigurationError: If the id is unknown or its job is disabled
    """
    for job in scheduled_jobs(configs, registry):
        if job.job_id == job_id:
            return job
    raise ConfigurationError(f"Unknown sync job: {job_id}")
