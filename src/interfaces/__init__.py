"""Abstract interfaces for the external services cratedigger talks to.

The ingestion services depend only on these contracts; concrete adapters in
``src.providers`` are chosen in ``src/main.py``.
"""

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.music_db_provider import (
    AlbumCandidate,
    AlbumEnrichment,
    IAlbumMetadataProvider,
)
from src.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "AlbumCandidate",
    "AlbumEnrichment",
    "IAlbumMetadataProvider",
    "IEmbeddingProvider",
    "IVectorStoreProvider",
]
