"""Abstract base class for the album vector collection.

Defines the keyed store the ingestion loop writes to and a separate
retrieval layer reads from.  Records are keyed by their deterministic
album UUID, so ``upsert`` is the only write operation ingestion needs.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any

from src.models.album import AlbumRecord


# Concrete implementation: ChromaDBProvider (src/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for the album vector collection.

    Backend failures surface as
    :class:`~src.utils.errors.StoreUnavailableError`.  Programming errors
    (e.g. upserting a record without a vector) raise ``ValueError``.

    **Supported filter syntax** for :meth:`search`: exact matches on the
    filterable attributes, e.g. ``{"artist": "Miles Davis"}`` or
    ``{"artist": "Nas", "title": "Illmatic"}``.
    """

    @abstractmethod
    async def ensure_collection(self) -> None:
        """Create the backing collection if it does not exist yet (idempotent)."""

    @abstractmethod
    async def upsert(self, record: AlbumRecord) -> None:
        """Insert *record* or replace the record with the same ``id``.

        Raises
        ------
        ValueError
            If ``record.vector`` is empty or has the wrong dimension.  A
            record without a vector must never become visible to search.
        """

    @abstractmethod
    async def get(self, album_id: uuid.UUID) -> AlbumRecord | None:
        """Return the stored record (vector included) or ``None``."""

    @abstractmethod
    async def search(
        self,
        query_vector: list[float],
        top_k: int = 10,
        filters: dict[str, Any] | None = None,
    ) -> list[AlbumRecord]:
        """Return up to *top_k* records ranked by similarity (descending).

        Each returned record has ``score`` set to its similarity in
        ``[0, 1]``.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored records."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the collection is reachable."""
