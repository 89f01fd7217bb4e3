"""Embedding provider implementations.

    NomicEmbeddingProvider -- nomic-embed-text via Ollama (768 dims).
    Free and local, but requires a running Ollama server.
"""

from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider

__all__ = ["NomicEmbeddingProvider"]
