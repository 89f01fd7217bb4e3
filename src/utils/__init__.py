"""Utility modules for cratedigger.

- **concurrency** -- cancellation-aware sleeping for the ingestion loop.
- **errors** -- exception hierarchy rooted at CrateDiggerError.
- **identity** -- deterministic album ids from (artist, title).
- **logging** -- structlog setup (console in development, JSON in production).
- **text_normalizer** -- display cleanup and natural-key normalization.
"""

from src.utils.errors import (
    ConfigurationError,
    CrateDiggerError,
    EmbeddingUnavailableError,
    MalformedResponseError,
    StoreUnavailableError,
    TransportError,
)
from src.utils.identity import album_id, natural_key

__all__ = [
    "ConfigurationError",
    "CrateDiggerError",
    "EmbeddingUnavailableError",
    "MalformedResponseError",
    "StoreUnavailableError",
    "TransportError",
    "album_id",
    "natural_key",
]
