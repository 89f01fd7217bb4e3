"""Long-running ingestion scheduler ("crate digging" loop).

The scheduler is a small state machine driven by an ``asyncio.Event``::

    (start) --warm-up--> IDLE --sweep--> SWEEPING --ok--> IDLE --cycle wait--> ...
                                             |
                                             +--exception--> FAULTED --recovery wait--> SWEEPING
    any wait, stop() set ------------------------------------------------------> STOPPED

One sweep walks the configured tags in order.  For each tag it fetches one
pseudo-random page of top albums, hands every candidate (in source order) to
the :class:`~src.services.ingestion.album_ingestor.AlbumIngestor`, then
pauses for the politeness delay.  Sweeps never overlap, which also keeps
the request rate to Last.fm bounded without a separate rate limiter.

Every wait goes through :func:`~src.utils.concurrency.interruptible_sleep`,
so :meth:`IngestionScheduler.stop` takes effect immediately, even in the
middle of the hour-long cycle wait.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from src.services.ingestion.album_ingestor import IngestOutcome
from src.utils.concurrency import interruptible_sleep

if TYPE_CHECKING:
    from src.config.loader import DiggingConfig
    from src.interfaces.music_db_provider import IAlbumMetadataProvider
    from src.interfaces.vector_store_provider import IVectorStoreProvider
    from src.services.ingestion.album_ingestor import AlbumIngestor

logger = structlog.get_logger(logger_name=__name__)


def pick_page(rng: random.Random, max_page: int) -> int:
    """Return a pseudo-random page in ``[1, max_page]``.

    A random page per sweep spreads ingestion over a tag's catalogue instead
    of re-reading the head of the list every hour.
    """
    return rng.randint(1, max(1, max_page))


class SchedulerState(str, Enum):  # noqa: UP042 (StrEnum needs Python 3.11+)
    """Lifecycle states of the ingestion loop."""

    IDLE = "idle"
    SWEEPING = "sweeping"
    FAULTED = "faulted"
    STOPPED = "stopped"


@dataclass
class SweepReport:
    """Counters for one sweep."""

    tags: int = 0
    candidates: int = 0
    stored: int = 0
    skipped_incomplete: int = 0
    skipped_embedding: int = 0
    cancelled: bool = False

    def record(self, outcome: IngestOutcome) -> None:
        self.candidates += 1
        if outcome is IngestOutcome.STORED:
            self.stored += 1
        elif outcome is IngestOutcome.SKIPPED_INCOMPLETE:
            self.skipped_incomplete += 1
        elif outcome is IngestOutcome.SKIPPED_EMBEDDING:
            self.skipped_embedding += 1


class IngestionScheduler:
    """Periodically sweeps Last.fm tags into the album collection.

    Parameters
    ----------
    config:
        Tags, page bounds and wait intervals.
    metadata_provider:
        Source of candidate albums per tag.
    ingestor:
        Per-album pipeline (enrich, embed, upsert).
    vector_store:
        Album collection; only ``ensure_collection`` is called here.
    rng:
        Random source for page selection.  Seed it in tests.
    stop_event:
        Shared cancellation signal.  A new event is created when omitted.
    """

    def __init__(
        self,
        config: DiggingConfig,
        metadata_provider: IAlbumMetadataProvider,
        ingestor: AlbumIngestor,
        vector_store: IVectorStoreProvider,
        rng: random.Random | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        self._config = config
        self._metadata_provider = metadata_provider
        self._ingestor = ingestor
        self._vector_store = vector_store
        self._rng = rng or random.Random()
        self._stop_event = stop_event or asyncio.Event()
        self._state = SchedulerState.IDLE
        self._last_report: SweepReport | None = None
        self._sweeps_completed = 0
        self._sweeps_failed = 0

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def last_report(self) -> SweepReport | None:
        return self._last_report

    @property
    def sweeps_completed(self) -> int:
        return self._sweeps_completed

    @property
    def sweeps_failed(self) -> int:
        return self._sweeps_failed

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def stop(self) -> None:
        """Request shutdown; every pending wait returns immediately."""
        if not self._stop_event.is_set():
            logger.info("scheduler_stop_requested", state=self._state.value)
        self._stop_event.set()

    async def _wait(self, seconds: float) -> bool:
        return await interruptible_sleep(seconds, self._stop_event)

    async def run(self) -> None:
        """Run sweeps forever until :meth:`stop` is called or the task is cancelled.

        Exceptions escaping a sweep are logged and followed by the recovery
        wait; they never end the loop.
        """
        logger.info(
            "scheduler_starting",
            warmup_seconds=self._config.warmup_seconds,
            tags=list(self._config.tags),
        )
        try:
            if await self._wait(self._config.warmup_seconds):
                return

            while not self._stop_event.is_set():
                try:
                    self._last_report = await self.sweep()
                except Exception as exc:
                    self._state = SchedulerState.FAULTED
                    self._sweeps_failed += 1
                    logger.error(
                        "sweep_failed",
                        error=str(exc),
                        error_type=type(exc).__name__,
                        retry_in_seconds=self._config.recovery_seconds,
                        exc_info=True,
                    )
                    if await self._wait(self._config.recovery_seconds):
                        return
                    continue

                if self._last_report.cancelled:
                    return

                self._sweeps_completed += 1
                logger.info(
                    "crates_refreshed",
                    sleep_seconds=self._config.cycle_seconds,
                    **asdict(self._last_report),
                )
                if await self._wait(self._config.cycle_seconds):
                    return
        finally:
            self._state = SchedulerState.STOPPED
            logger.info(
                "scheduler_stopped",
                sweeps_completed=self._sweeps_completed,
                sweeps_failed=self._sweeps_failed,
            )

    async def sweep(self) -> SweepReport:
        """Run one pass over every configured tag.

        Raises whatever the vector store raises (e.g.
        :class:`~src.utils.errors.StoreUnavailableError`); the caller owns
        the sweep-level recovery.
        """
        self._state = SchedulerState.SWEEPING
        report = SweepReport()

        await self._vector_store.ensure_collection()

        for tag in self._config.tags:
            if self._stop_event.is_set():
                report.cancelled = True
                break

            finished = await self._sweep_tag(tag, report)
            if not finished or await self._wait(self._config.politeness_seconds):
                report.cancelled = True
                break

        self._state = SchedulerState.IDLE
        logger.info("sweep_complete", **asdict(report))
        return report

    async def _sweep_tag(self, tag: str, report: SweepReport) -> bool:
        """Ingest one page of *tag*.  Returns ``False`` if stopped midway."""
        page = pick_page(self._rng, self._config.max_page)
        logger.info("digging_for_tag", tag=tag, page=page)

        candidates = await self._metadata_provider.fetch_top_albums(tag, page)
        report.tags += 1

        for candidate in candidates:
            if self._stop_event.is_set():
                return False
            outcome = await self._ingestor.ingest_candidate(tag, candidate)
            report.record(outcome)
        return True
