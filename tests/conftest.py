"""Shared pytest fixtures for the cratedigger test suite."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.loader import DiggingConfig
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.music_db_provider import (
    AlbumCandidate,
    AlbumEnrichment,
    IAlbumMetadataProvider,
)
from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.album import AlbumRecord

EMBEDDING_DIM = 768


# ---------------------------------------------------------------------------
# In-memory vector store
# ---------------------------------------------------------------------------


class InMemoryVectorStore(IVectorStoreProvider):
    """Dict-backed album collection used by service-level tests."""

    def __init__(self, dimension: int = EMBEDDING_DIM) -> None:
        self.records: dict[uuid.UUID, AlbumRecord] = {}
        self.dimension = dimension
        self.ensure_calls = 0
        self.upsert_calls = 0

    async def ensure_collection(self) -> None:
        self.ensure_calls += 1

    async def upsert(self, record: AlbumRecord) -> None:
        if not record.has_vector or len(record.vector) != self.dimension:
            raise ValueError("bad vector")
        self.upsert_calls += 1
        self.records[record.id] = record

    async def get(self, album_id: uuid.UUID) -> AlbumRecord | None:
        return self.records.get(album_id)

    async def search(
        self,
        query_vector: list[float],
        top_k: int = 10,
        filters: dict[str, Any] | None = None,
    ) -> list[AlbumRecord]:
        return list(self.records.values())[:top_k]

    async def count(self) -> int:
        return len(self.records)

    def get_provider_name(self) -> str:
        return "memory"

    def is_available(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def mock_embedding_provider() -> MagicMock:
    """Embedding provider returning a constant 768-dim vector."""
    mock = MagicMock(spec=IEmbeddingProvider)
    mock.embed_single = AsyncMock(return_value=[0.1] * EMBEDDING_DIM)
    mock.embed = AsyncMock(return_value=[[0.1] * EMBEDDING_DIM])
    mock.get_dimension.return_value = EMBEDDING_DIM
    mock.get_provider_name.return_value = "mock_embedding"
    mock.is_available.return_value = True
    return mock


@pytest.fixture
def mock_metadata_provider() -> MagicMock:
    """Metadata provider with no candidates and empty enrichment by default."""
    mock = MagicMock(spec=IAlbumMetadataProvider)
    mock.fetch_top_albums = AsyncMock(return_value=[])
    mock.fetch_album_details = AsyncMock(return_value=AlbumEnrichment())
    mock.get_provider_name.return_value = "mock_lastfm"
    mock.is_available.return_value = True
    return mock


@pytest.fixture
def fast_config() -> DiggingConfig:
    """Sweep configuration with every wait set to zero."""
    return DiggingConfig(
        tags=("jazz", "soul"),
        api_key="test-key",
        warmup_seconds=0,
        politeness_seconds=0,
        cycle_seconds=0,
        recovery_seconds=0,
    )


@pytest.fixture
def kind_of_blue() -> AlbumCandidate:
    return AlbumCandidate(
        artist="Miles Davis",
        title="Kind of Blue",
        source_url="https://www.last.fm/music/Miles+Davis/Kind+of+Blue",
        cover_url="http://cover.jpg",
    )
