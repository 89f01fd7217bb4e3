"""Per-album ingestion step: identify -> enrich -> describe -> embed -> upsert.

:class:`AlbumIngestor` owns the innermost containment boundary of a sweep.
Enrichment failures degrade the description, embedding failures skip the
album, and only vector-store failures escape to the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

import structlog

from src.models.album import AlbumRecord
from src.services.ingestion.description_builder import build_description
from src.utils.errors import EmbeddingUnavailableError
from src.utils.identity import album_id

if TYPE_CHECKING:
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.interfaces.music_db_provider import AlbumCandidate, IAlbumMetadataProvider
    from src.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class IngestOutcome(str, Enum):  # noqa: UP042 (StrEnum needs Python 3.11+)
    """What happened to one candidate."""

    STORED = "stored"
    SKIPPED_INCOMPLETE = "skipped_incomplete"
    SKIPPED_EMBEDDING = "skipped_embedding"


class AlbumIngestor:
    """Turns one :class:`AlbumCandidate` into a stored :class:`AlbumRecord`.

    Parameters
    ----------
    metadata_provider:
        Source of best-effort album details.
    embedding_provider:
        Produces the album's vector from its description.
    vector_store:
        Destination collection.
    """

    def __init__(
        self,
        metadata_provider: IAlbumMetadataProvider,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
    ) -> None:
        self._metadata_provider = metadata_provider
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store

    async def ingest_candidate(self, tag: str, candidate: AlbumCandidate) -> IngestOutcome:
        """Ingest one candidate found under *tag*.

        Raises
        ------
        src.utils.errors.StoreUnavailableError
            If the vector store rejects the write.
        """
        if not candidate.has_natural_key:
            logger.info("album_skipped_incomplete_key", tag=tag, source_url=candidate.source_url)
            return IngestOutcome.SKIPPED_INCOMPLETE

        record_id = album_id(candidate.artist, candidate.title)
        enrichment = await self._metadata_provider.fetch_album_details(
            candidate.artist, candidate.title
        )
        description = build_description(tag, candidate, enrichment)

        try:
            vector = await self._embedding_provider.embed_single(description)
        except EmbeddingUnavailableError as exc:
            logger.warning(
                "album_embedding_failed",
                tag=tag,
                album_id=str(record_id),
                artist=candidate.artist,
                title=candidate.title,
                error=str(exc),
            )
            return IngestOutcome.SKIPPED_EMBEDDING

        record = AlbumRecord(
            id=record_id,
            artist=candidate.artist,
            title=candidate.title,
            description=description,
            cover_url=candidate.cover_url,
            source_url=candidate.source_url,
            vector=vector,
        )
        await self._vector_store.upsert(record)

        logger.info(
            "album_stored",
            tag=tag,
            album_id=str(record_id),
            title=candidate.title,
            enriched=not enrichment.is_empty,
        )
        return IngestOutcome.STORED
