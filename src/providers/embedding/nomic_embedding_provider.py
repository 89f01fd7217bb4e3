"""Nomic embedding provider adapter (local/free via Ollama).

Wraps the Ollama OpenAI-compatible endpoint to implement
:class:`IEmbeddingProvider` using ``nomic-embed-text`` (768 dimensions).
Runs locally with no API key required.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.utils.errors import EmbeddingUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_OLLAMA_BATCH_LIMIT = 512


class NomicEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by ``nomic-embed-text`` served via Ollama.

    Communicates through the OpenAI-compatible ``/v1`` endpoint that Ollama
    exposes.  Every call is bounded by ``settings.http_timeout_seconds``;
    connection failures, timeouts and API errors all surface as
    :class:`EmbeddingUnavailableError` so the caller can skip the album.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._timeout = settings.http_timeout_seconds
        self._client = openai.AsyncOpenAI(
            base_url=f"{self._base_url}/v1",
            api_key="ollama",  # Ollama doesn't require a real key
            timeout=self._timeout,
            max_retries=0,
        )
        self._model = settings.embedding_model
        self._dimension = settings.embedding_dimension

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Automatically splits into batches of 512 for the Ollama backend.
        """
        if not texts:
            return []
        if any(not text.strip() for text in texts):
            raise ValueError("cannot embed empty text")

        try:
            all_embeddings: list[list[float]] = []
            for start in range(0, len(texts), _OLLAMA_BATCH_LIMIT):
                batch = texts[start : start + _OLLAMA_BATCH_LIMIT]
                response = await self._client.embeddings.create(
                    input=batch,
                    model=self._model,
                )
                all_embeddings.extend(item.embedding for item in response.data)
                logger.debug(
                    "nomic_embedding_batch",
                    model=self._model,
                    batch_size=len(batch),
                )
        except openai.APIError as exc:
            raise EmbeddingUnavailableError(
                message=f"Nomic/Ollama embedding API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if len(all_embeddings) != len(texts):
            raise EmbeddingUnavailableError(
                message=f"expected {len(texts)} vectors, got {len(all_embeddings)}",
                provider_name=self.get_provider_name(),
            )
        for vector in all_embeddings:
            if len(vector) != self._dimension:
                raise EmbeddingUnavailableError(
                    message=(
                        f"{self._model} returned a {len(vector)}-dim vector, "
                        f"expected {self._dimension}"
                    ),
                    provider_name=self.get_provider_name(),
                )
        return all_embeddings

    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""
        result = await self.embed([text])
        return result[0]

    def get_dimension(self) -> int:
        """Return the configured dimension (768 for nomic-embed-text)."""
        return self._dimension

    def get_provider_name(self) -> str:
        return "nomic_embedding"

    def is_available(self) -> bool:
        """Return ``True`` if the Ollama server is reachable."""
        if not self._base_url:
            return False
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=3.0)
            return response.status_code == 200
        except (httpx.ConnectError, httpx.TimeoutException):
            return False
