"""Album record -- the unit stored in and returned from the vector collection.

One :class:`AlbumRecord` per logical album.  Its ``id`` is derived from the
normalised ``(artist, title)`` pair (see :mod:`src.utils.identity`), so every
re-ingestion of the same album overwrites the same record instead of adding
a duplicate.  The model is frozen; use ``model_copy(update=...)`` to attach
a vector or a search score.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field


class AlbumRecord(BaseModel):
    """An album with its enriched description and embedding."""

    model_config = ConfigDict(frozen=True)

    # Content-addressed key (MD5 of "artist|title", lowercased and trimmed).
    id: uuid.UUID = Field(description="Deterministic album identifier.")
    artist: str = Field(min_length=1, description="Display artist name.")
    title: str = Field(min_length=1, description="Display album title.")
    # Sole input to the embedding model.
    description: str = Field(default="", description="Enriched free-text description.")
    cover_url: str = Field(default="", description="Large cover image URL, or empty.")
    source_url: str = Field(default="", description="Last.fm album page URL, or empty.")
    vector: list[float] = Field(
        default_factory=list,
        description="Embedding of ``description``; empty until embedded.",
    )
    # Only set on search results; the store never persists it.
    score: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Similarity to the query vector (search results only).",
    )

    @property
    def has_vector(self) -> bool:
        return len(self.vector) > 0
