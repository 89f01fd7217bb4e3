"""ChromaDB vector store provider adapter.

Wraps `chromadb.PersistentClient` to implement :class:`IVectorStoreProvider`
for album records.  Uses cosine distance for similarity search.  Fully
local and Python-native; the collection persists under
``CHROMADB_PERSIST_DIR``.

Record layout in the collection:

* id        -- ``str(album.id)`` (the deterministic UUID)
* embedding -- ``album.vector``
* document  -- ``album.description``
* metadata  -- ``artist``, ``title`` (filterable), ``cover_url``, ``source_url``
"""

from __future__ import annotations

import os
import uuid
from typing import Any

# ChromaDB's bundled PostHog telemetry client breaks against some installed
# posthog versions ("capture() takes 1 positional argument but 3 were
# given").  Disable it through the env var and the SDK flag before chromadb
# is imported, and again through client Settings below.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.album import AlbumRecord
from src.utils.errors import StoreUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_FILTERABLE_FIELDS = ("artist", "title")


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Embedding function that must never run.

    Album vectors are always computed by the embedding provider before
    ``upsert``.  Without this, ChromaDB downloads its default ONNX model on
    collection creation.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "cratedigger stores pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        """Return function name (required by ChromaDB's EmbeddingFunction protocol)."""
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Album collection backed by ChromaDB with local persistence.

    Parameters
    ----------
    persist_directory:
        Directory for ChromaDB's on-disk files.
    collection_name:
        Collection holding the album records.
    dimension:
        Expected vector length.  Upserts with any other length are rejected,
        and an existing collection built with another dimension fails fast.
    """

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "albums",
        dimension: int = 768,
    ) -> None:
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._dimension = dimension
        self._client = chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        self._collection = self._open_collection()
        self._validate_embedding_dimensions()

    # ------------------------------------------------------------------
    # Collection management
    # ------------------------------------------------------------------

    def _open_collection(self) -> Any:
        # Collections created by an older ChromaDB with the default
        # embedding function reject a different one; reopen without it.
        try:
            return self._client.get_or_create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except ValueError:
            return self._client.get_or_create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
            )

    def _validate_embedding_dimensions(self) -> None:
        """Compare one stored vector's length with the configured dimension.

        A mismatch means every search would compare vectors from different
        models, so it is a startup failure.
        """
        try:
            if self._collection.count() == 0:
                return
            sample = self._collection.peek(limit=1)
            embeddings = sample.get("embeddings") if sample else None
            if embeddings is None or len(embeddings) == 0:
                return
            stored_dim = len(embeddings[0])
        except Exception as exc:
            logger.warning("embedding_dimension_check_skipped", error=str(exc))
            return

        if stored_dim != self._dimension:
            logger.error(
                "embedding_dimension_mismatch",
                stored_dim=stored_dim,
                expected_dim=self._dimension,
                collection=self._collection_name,
            )
            raise StoreUnavailableError(
                message=(
                    f"Embedding dimension mismatch: collection '{self._collection_name}' "
                    f"holds {stored_dim}-dim vectors but {self._dimension} are configured"
                ),
                provider_name=self.get_provider_name(),
            )
        logger.info("embedding_dimension_validated", dimension=stored_dim)

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def ensure_collection(self) -> None:
        """(Re)open the collection, creating it if it was dropped."""
        try:
            self._collection = self._open_collection()
        except Exception as exc:
            raise StoreUnavailableError(
                message=f"ChromaDB ensure_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def upsert(self, record: AlbumRecord) -> None:
        """Insert or replace *record* by id."""
        if not record.has_vector:
            raise ValueError(f"refusing to upsert album {record.id} without a vector")
        if len(record.vector) != self._dimension:
            raise ValueError(
                f"album {record.id} has a {len(record.vector)}-dim vector, "
                f"expected {self._dimension}"
            )

        try:
            self._collection.upsert(
                ids=[str(record.id)],
                embeddings=[list(record.vector)],
                documents=[record.description],
                metadatas=[self._record_to_metadata(record)],
            )
        except Exception as exc:
            raise StoreUnavailableError(
                message=f"ChromaDB upsert failed for {record.id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("chromadb_upsert", album_id=str(record.id), title=record.title)

    async def get(self, album_id: uuid.UUID) -> AlbumRecord | None:
        """Return the stored record for *album_id*, vector included."""
        try:
            result = self._collection.get(
                ids=[str(album_id)],
                include=["embeddings", "documents", "metadatas"],
            )
        except Exception as exc:
            raise StoreUnavailableError(
                message=f"ChromaDB get failed for {album_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        ids = result.get("ids") or []
        if not ids:
            return None

        embeddings = result.get("embeddings")
        documents = result.get("documents") or [""]
        metadatas = result.get("metadatas") or [{}]
        vector = embeddings[0] if embeddings is not None and len(embeddings) > 0 else []
        return self._to_record(ids[0], metadatas[0] or {}, documents[0] or "", vector)

    async def search(
        self,
        query_vector: list[float],
        top_k: int = 10,
        filters: dict[str, Any] | None = None,
    ) -> list[AlbumRecord]:
        """Nearest-neighbour search ranked by cosine similarity."""
        if top_k <= 0:
            return []
        if len(query_vector) != self._dimension:
            raise ValueError(
                f"query vector has {len(query_vector)} dims, expected {self._dimension}"
            )

        try:
            stored = self._collection.count()
            if stored == 0:
                return []

            kwargs: dict[str, Any] = {
                "query_embeddings": [list(query_vector)],
                "n_results": min(top_k, stored),
                "include": ["documents", "metadatas", "distances"],
            }
            where_clause = self._translate_filters(filters) if filters else None
            if where_clause:
                kwargs["where"] = where_clause

            results = self._collection.query(**kwargs)
        except Exception as exc:
            raise StoreUnavailableError(
                message=f"ChromaDB search failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not results.get("ids") or not results["ids"][0]:
            return []

        ids = results["ids"][0]
        documents = results["documents"][0] if results.get("documents") else [""] * len(ids)
        metadatas = results["metadatas"][0] if results.get("metadatas") else [{}] * len(ids)
        distances = results["distances"][0] if results.get("distances") else [1.0] * len(ids)

        hits: list[AlbumRecord] = []
        for record_id, doc, meta, distance in zip(ids, documents, metadatas, distances, strict=True):
            similarity = max(0.0, min(1.0, 1.0 - float(distance)))
            record = self._to_record(record_id, meta or {}, doc or "", [])
            hits.append(record.model_copy(update={"score": similarity}))

        hits.sort(key=lambda r: r.score or 0.0, reverse=True)
        logger.info(
            "chromadb_search",
            top_k=top_k,
            results_count=len(hits),
            top_score=hits[0].score if hits else 0.0,
        )
        return hits

    async def count(self) -> int:
        try:
            return self._collection.count()
        except Exception as exc:
            raise StoreUnavailableError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB collection is accessible."""
        try:
            self._collection.count()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _record_to_metadata(record: AlbumRecord) -> dict[str, str]:
        """Flatten the non-vector fields into ChromaDB metadata.

        ``score`` is deliberately absent: it only exists on search results.
        """
        return {
            "artist": record.artist,
            "title": record.title,
            "cover_url": record.cover_url,
            "source_url": record.source_url,
        }

    @staticmethod
    def _to_record(
        record_id: str,
        meta: dict[str, Any],
        description: str,
        vector: Any,
    ) -> AlbumRecord:
        return AlbumRecord(
            id=uuid.UUID(record_id),
            artist=str(meta.get("artist", "")),
            title=str(meta.get("title", "")),
            description=description,
            cover_url=str(meta.get("cover_url", "")),
            source_url=str(meta.get("source_url", "")),
            vector=[float(x) for x in vector] if vector is not None else [],
        )

    @staticmethod
    def _translate_filters(filters: dict[str, Any]) -> dict[str, Any] | None:
        """Translate ``{"artist": ..., "title": ...}`` to a ChromaDB where-clause.

        Unknown keys are ignored with a warning.  Several conditions are
        combined with ``$and`` because ChromaDB only accepts one top-level
        key.
        """
        conditions: list[dict[str, Any]] = []
        for key, value in filters.items():
            if key not in _FILTERABLE_FIELDS:
                logger.warning("chromadb_unknown_filter", key=key)
                continue
            conditions.append({key: {"$eq": str(value)}})

        if not conditions:
            return None
        if len(conditions) == 1:
            return conditions[0]
        return {"$and": conditions}
