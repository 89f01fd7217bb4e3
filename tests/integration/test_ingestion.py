"""Integration tests for the ingestion pipeline.

Wires the real LastFmProvider (over a mocked HTTP client), the real
AlbumIngestor and IngestionScheduler, and a real ChromaDB collection under
``tmp_path``.  Only Last.fm and the embedding model are faked.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.loader import DiggingConfig
from src.providers.music_db.lastfm_provider import LastFmProvider
from src.providers.vector_store.chromadb_provider import ChromaDBProvider
from src.services.ingestion.album_ingestor import AlbumIngestor
from src.services.ingestion.scheduler import IngestionScheduler, SchedulerState
from src.services.ingestion.seed_loader import SeedLoader
from src.utils.identity import album_id

_TOP_ALBUMS = {
    "albums": {
        "album": [
            {
                "name": "Kind of Blue",
                "url": "https://www.last.fm/music/Miles+Davis/Kind+of+Blue",
                "artist": {"name": "Miles Davis"},
                "image": [
                    {"#text": "http://small.jpg", "size": "small"},
                    {"#text": "http://medium.jpg", "size": "medium"},
                    {"#text": "http://cover.jpg", "size": "large"},
                ],
            }
        ]
    }
}


def _response(payload: Any, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def _lastfm_client(details_status: int = 500, details: Any = None) -> AsyncMock:
    """HTTP client answering tag.gettopalbums with Kind of Blue."""

    async def _get(url, params=None, **kwargs):
        if params["method"] == "tag.gettopalbums":
            return _response(_TOP_ALBUMS)
        return _response(details, status_code=details_status)

    client = AsyncMock()
    client.get = AsyncMock(side_effect=_get)
    return client


@pytest.fixture()
def chroma_store(tmp_path) -> ChromaDBProvider:
    return ChromaDBProvider(
        persist_directory=str(tmp_path / "chroma"),
        collection_name="albums",
        dimension=768,
    )


def _scheduler(client, embedding_provider, store, tags=("jazz",)) -> IngestionScheduler:
    config = DiggingConfig(
        tags=tags,
        api_key="test-key",
        warmup_seconds=0,
        politeness_seconds=0,
        cycle_seconds=0,
        recovery_seconds=0,
    )
    provider = LastFmProvider(http_client=client, api_key="test-key")
    ingestor = AlbumIngestor(provider, embedding_provider, store)
    return IngestionScheduler(config, provider, ingestor, store)


class TestSweepIntoChroma:
    @pytest.mark.asyncio
    async def test_unenriched_album_gets_fallback_description(
        self, mock_embedding_provider, chroma_store
    ) -> None:
        scheduler = _scheduler(_lastfm_client(), mock_embedding_provider, chroma_store)

        report = await scheduler.sweep()

        assert report.stored == 1
        record = await chroma_store.get(album_id("Miles Davis", "Kind of Blue"))
        assert record is not None
        assert record.description == (
            "Miles Davis - Kind of Blue. Music style and genre: jazz. "
            "A jazz album with jazz vibes and influences."
        )
        assert record.cover_url == "http://cover.jpg"
        assert record.source_url == "https://www.last.fm/music/Miles+Davis/Kind+of+Blue"
        assert len(record.vector) == 768

    @pytest.mark.asyncio
    async def test_enriched_album_description(
        self, mock_embedding_provider, chroma_store
    ) -> None:
        details = {
            "album": {
                "name": "Kind of Blue",
                "artist": "Miles Davis",
                "tags": {"tag": [{"name": "jazz"}, {"name": "modal"}]},
                "wiki": {
                    "published": "17 Aug 1959, 00:00",
                    "summary": 'Landmark record. <a href="https://www.last.fm">Read more</a>',
                },
            }
        }
        client = _lastfm_client(details_status=200, details=details)
        scheduler = _scheduler(client, mock_embedding_provider, chroma_store)

        await scheduler.sweep()

        record = await chroma_store.get(album_id("Miles Davis", "Kind of Blue"))
        assert record.description == (
            "Miles Davis - Kind of Blue. Released in 1959. "
            "Genres and styles: jazz, modal. Landmark record."
        )

    @pytest.mark.asyncio
    async def test_repeated_sweeps_are_idempotent(
        self, mock_embedding_provider, chroma_store
    ) -> None:
        scheduler = _scheduler(
            _lastfm_client(), mock_embedding_provider, chroma_store, tags=("jazz", "modal")
        )

        await scheduler.sweep()
        await scheduler.sweep()

        assert await chroma_store.count() == 1
        assert scheduler.state is SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_seed_then_sweep_share_identity(
        self, mock_embedding_provider, chroma_store
    ) -> None:
        await SeedLoader(mock_embedding_provider, chroma_store).seed()
        assert await chroma_store.count() == 10

        await _scheduler(_lastfm_client(), mock_embedding_provider, chroma_store).sweep()

        assert await chroma_store.count() == 10
        record = await chroma_store.get(album_id("Miles Davis", "Kind of Blue"))
        assert record.description.endswith("A jazz album with jazz vibes and influences.")

    @pytest.mark.asyncio
    async def test_search_finds_stored_album(self, mock_embedding_provider, chroma_store) -> None:
        await _scheduler(_lastfm_client(), mock_embedding_provider, chroma_store).sweep()

        hits = await chroma_store.search([0.1] * 768, top_k=5)

        assert [h.title for h in hits] == ["Kind of Blue"]
        assert hits[0].score == pytest.approx(1.0, abs=1e-4)
