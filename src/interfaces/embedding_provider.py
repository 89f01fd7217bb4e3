"""Abstract base class for text-embedding service providers.

Defines the contract for turning album descriptions into fixed-length
vectors.  The default implementation talks to ``nomic-embed-text`` on a
local Ollama server; anything that produces vectors of the configured
dimension can be swapped in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation:
#   NomicEmbeddingProvider -- nomic-embed-text via Ollama (768-dim)
# Located in: src/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for embedding services used by the ingestion loop.

    Vectors produced here are written to the
    :class:`~src.interfaces.vector_store_provider.IVectorStoreProvider`.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            Non-empty text strings to embed.

        Returns
        -------
        list[list[float]]
            Vectors in the same order as *texts*, each of length
            :meth:`get_dimension`.

        Raises
        ------
        ValueError
            If any text is empty.
        src.utils.errors.EmbeddingUnavailableError
            If the embedding service is unreachable or returns bad vectors.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for one text string."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the vector length, e.g. ``768`` for nomic-embed-text.

        Must match the dimension the vector store was built with.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this embedding provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the embedding backend is reachable."""
