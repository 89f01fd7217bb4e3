"""Unit tests for the ingestion scheduler state machine."""

from __future__ import annotations

import asyncio
import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.interfaces.music_db_provider import AlbumCandidate
from src.services.ingestion.album_ingestor import AlbumIngestor, IngestOutcome
from src.services.ingestion.scheduler import (
    IngestionScheduler,
    SchedulerState,
    SweepReport,
    pick_page,
)
from src.utils.errors import EmbeddingUnavailableError, StoreUnavailableError


def _candidates(count: int) -> list[AlbumCandidate]:
    return [AlbumCandidate(artist=f"Artist {i}", title=f"Album {i}") for i in range(count)]


def _mock_ingestor() -> MagicMock:
    ingestor = MagicMock(spec=AlbumIngestor)
    ingestor.ingest_candidate = AsyncMock(return_value=IngestOutcome.STORED)
    return ingestor


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


# ======================================================================
# pick_page / SweepReport
# ======================================================================


class TestPickPage:
    def test_within_bounds(self) -> None:
        rng = random.Random(42)
        pages = {pick_page(rng, 19) for _ in range(500)}
        assert min(pages) >= 1
        assert max(pages) <= 19

    def test_reproducible_with_seed(self) -> None:
        assert pick_page(random.Random(7), 19) == pick_page(random.Random(7), 19)

    def test_non_positive_max_page_is_first_page(self) -> None:
        assert pick_page(random.Random(), 0) == 1


class TestSweepReport:
    def test_record_counts_outcomes(self) -> None:
        report = SweepReport()
        for outcome in (
            IngestOutcome.STORED,
            IngestOutcome.STORED,
            IngestOutcome.SKIPPED_EMBEDDING,
            IngestOutcome.SKIPPED_INCOMPLETE,
        ):
            report.record(outcome)

        assert report.candidates == 4
        assert report.stored == 2
        assert report.skipped_embedding == 1
        assert report.skipped_incomplete == 1


# ======================================================================
# sweep()
# ======================================================================


class TestSweep:
    @pytest.mark.asyncio
    async def test_walks_tags_in_order(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        ingestor = _mock_ingestor()
        mock_metadata_provider.fetch_top_albums = AsyncMock(return_value=_candidates(2))
        scheduler = IngestionScheduler(
            config=fast_config,
            metadata_provider=mock_metadata_provider,
            ingestor=ingestor,
            vector_store=vector_store,
            rng=random.Random(1),
        )

        report = await scheduler.sweep()

        tags = [c.args[0] for c in mock_metadata_provider.fetch_top_albums.call_args_list]
        pages = [c.args[1] for c in mock_metadata_provider.fetch_top_albums.call_args_list]
        assert tags == ["jazz", "soul"]
        assert all(1 <= page <= fast_config.max_page for page in pages)
        assert vector_store.ensure_calls == 1
        assert report.tags == 2
        assert report.candidates == 4
        assert report.stored == 4
        assert report.cancelled is False
        assert scheduler.state is SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_candidates_ingested_in_source_order(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        ingestor = _mock_ingestor()
        candidates = _candidates(3)
        mock_metadata_provider.fetch_top_albums = AsyncMock(side_effect=[candidates, []])
        scheduler = IngestionScheduler(
            fast_config, mock_metadata_provider, ingestor, vector_store
        )

        await scheduler.sweep()

        seen = [c.args[1] for c in ingestor.ingest_candidate.call_args_list]
        assert seen == candidates
        assert all(c.args[0] == "jazz" for c in ingestor.ingest_candidate.call_args_list)

    @pytest.mark.asyncio
    async def test_embedding_failure_on_one_album_does_not_stop_sweep(
        self,
        fast_config,
        mock_metadata_provider,
        mock_embedding_provider,
        vector_store,
    ) -> None:
        config = fast_config.model_copy(update={"tags": ("jazz",)})
        mock_metadata_provider.fetch_top_albums = AsyncMock(return_value=_candidates(5))
        vector = [0.1] * 768
        mock_embedding_provider.embed_single = AsyncMock(
            side_effect=[
                vector,
                vector,
                EmbeddingUnavailableError(provider_name="nomic_embedding"),
                vector,
                vector,
            ]
        )
        ingestor = AlbumIngestor(mock_metadata_provider, mock_embedding_provider, vector_store)
        scheduler = IngestionScheduler(config, mock_metadata_provider, ingestor, vector_store)

        report = await scheduler.sweep()

        assert report.stored == 4
        assert report.skipped_embedding == 1
        assert await vector_store.count() == 4
        stored_titles = {r.title for r in vector_store.records.values()}
        assert "Album 2" not in stored_titles

    @pytest.mark.asyncio
    async def test_store_failure_escapes_sweep(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        vector_store.ensure_collection = AsyncMock(
            side_effect=StoreUnavailableError(provider_name="memory")
        )
        scheduler = IngestionScheduler(
            fast_config, mock_metadata_provider, _mock_ingestor(), vector_store
        )

        with pytest.raises(StoreUnavailableError):
            await scheduler.sweep()
        mock_metadata_provider.fetch_top_albums.assert_not_called()

    @pytest.mark.asyncio
    async def test_stop_between_candidates(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        mock_metadata_provider.fetch_top_albums = AsyncMock(return_value=_candidates(3))
        ingestor = _mock_ingestor()
        scheduler = IngestionScheduler(
            fast_config, mock_metadata_provider, ingestor, vector_store
        )

        async def _ingest_then_stop(tag, candidate):
            scheduler.stop()
            return IngestOutcome.STORED

        ingestor.ingest_candidate = AsyncMock(side_effect=_ingest_then_stop)

        report = await scheduler.sweep()

        assert report.candidates == 1
        assert report.cancelled is True
        assert mock_metadata_provider.fetch_top_albums.await_count == 1

    @pytest.mark.asyncio
    async def test_already_stopped_sweep_does_nothing(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        stop_event = asyncio.Event()
        stop_event.set()
        scheduler = IngestionScheduler(
            fast_config,
            mock_metadata_provider,
            _mock_ingestor(),
            vector_store,
            stop_event=stop_event,
        )

        report = await scheduler.sweep()

        assert report.cancelled is True
        assert report.tags == 0
        assert scheduler.stop_requested is True


# ======================================================================
# run()
# ======================================================================


class TestRun:
    @pytest.mark.asyncio
    async def test_initial_state_is_idle(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        scheduler = IngestionScheduler(
            fast_config, mock_metadata_provider, _mock_ingestor(), vector_store
        )
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.last_report is None

    @pytest.mark.asyncio
    async def test_recovers_from_failed_sweep(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        config = fast_config.model_copy(update={"tags": ("jazz",)})
        vector_store.ensure_collection = AsyncMock(
            side_effect=[StoreUnavailableError(provider_name="memory"), None]
        )
        scheduler = IngestionScheduler(
            config, mock_metadata_provider, _mock_ingestor(), vector_store
        )

        async def _fetch_then_stop(tag, page):
            scheduler.stop()
            return []

        mock_metadata_provider.fetch_top_albums = AsyncMock(side_effect=_fetch_then_stop)

        await scheduler.run()

        assert scheduler.sweeps_failed == 1
        assert vector_store.ensure_collection.await_count == 2
        # The retry was cut short by stop(), so it does not count as completed.
        assert scheduler.sweeps_completed == 0
        assert scheduler.state is SchedulerState.STOPPED
        assert scheduler.last_report is not None
        assert scheduler.last_report.cancelled is True

    @pytest.mark.asyncio
    async def test_faulted_state_during_recovery_wait(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        config = fast_config.model_copy(update={"recovery_seconds": 3600})
        vector_store.ensure_collection = AsyncMock(
            side_effect=StoreUnavailableError(provider_name="memory")
        )
        scheduler = IngestionScheduler(
            config, mock_metadata_provider, _mock_ingestor(), vector_store
        )

        task = asyncio.create_task(scheduler.run())
        await _wait_until(lambda: scheduler.state is SchedulerState.FAULTED)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=2)

        assert scheduler.sweeps_failed == 1
        assert scheduler.state is SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_interrupts_cycle_wait(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        config = fast_config.model_copy(update={"cycle_seconds": 3600})
        scheduler = IngestionScheduler(
            config, mock_metadata_provider, _mock_ingestor(), vector_store
        )

        task = asyncio.create_task(scheduler.run())
        await _wait_until(lambda: scheduler.sweeps_completed == 1)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=2)

        assert scheduler.sweeps_completed == 1
        assert scheduler.state is SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_during_warmup_skips_sweeps(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        config = fast_config.model_copy(update={"warmup_seconds": 3600})
        scheduler = IngestionScheduler(
            config, mock_metadata_provider, _mock_ingestor(), vector_store
        )

        task = asyncio.create_task(scheduler.run())
        await asyncio.sleep(0.01)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=2)

        mock_metadata_provider.fetch_top_albums.assert_not_called()
        assert vector_store.ensure_calls == 0
        assert scheduler.sweeps_completed == 0
        assert scheduler.state is SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_shared_stop_event(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        stop_event = asyncio.Event()
        config = fast_config.model_copy(update={"cycle_seconds": 3600})
        scheduler = IngestionScheduler(
            config,
            mock_metadata_provider,
            _mock_ingestor(),
            vector_store,
            stop_event=stop_event,
        )

        task = asyncio.create_task(scheduler.run())
        await _wait_until(lambda: scheduler.sweeps_completed == 1)
        stop_event.set()
        await asyncio.wait_for(task, timeout=2)

        assert scheduler.state is SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_interrupts_politeness_wait(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        config = fast_config.model_copy(update={"politeness_seconds": 3600})
        scheduler = IngestionScheduler(
            config, mock_metadata_provider, _mock_ingestor(), vector_store
        )

        task = asyncio.create_task(scheduler.run())
        await _wait_until(lambda: mock_metadata_provider.fetch_top_albums.await_count == 1)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=2)

        assert mock_metadata_provider.fetch_top_albums.await_count == 1
        assert scheduler.last_report.cancelled is True
        assert scheduler.sweeps_completed == 0
        assert scheduler.state is SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_cancelling_run_propagates(
        self, fast_config, mock_metadata_provider, vector_store
    ) -> None:
        fetch_started = asyncio.Event()

        async def _slow_fetch(tag, page):
            fetch_started.set()
            await asyncio.sleep(3600)
            return []

        mock_metadata_provider.fetch_top_albums = AsyncMock(side_effect=_slow_fetch)
        scheduler = IngestionScheduler(
            fast_config, mock_metadata_provider, _mock_ingestor(), vector_store
        )

        task = asyncio.create_task(scheduler.run())
        await asyncio.wait_for(fetch_started.wait(), timeout=2)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert scheduler.sweeps_failed == 0
        assert scheduler.state is SchedulerState.STOPPED
