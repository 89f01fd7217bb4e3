"""Vector store provider implementations.

ChromaDB is the sole implementation.  Album records persist at
CHROMADB_PERSIST_DIR and are searched by cosine similarity, with exact-match
filters on artist and title.
"""

from src.providers.vector_store.chromadb_provider import ChromaDBProvider

__all__ = ["ChromaDBProvider"]
