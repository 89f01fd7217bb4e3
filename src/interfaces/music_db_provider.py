"""Abstract base class for album-metadata providers.

Defines the contract for pulling candidate albums for a genre tag and for
best-effort per-album enrichment (wiki summary, release date, tags).  The
only implementation today is Last.fm, but the scheduler depends on this
interface alone.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class AlbumCandidate:
    """One album from a tag's top-albums page.

    All fields are trimmed strings; optional ones are ``""`` when the
    source did not provide them.

    Attributes
    ----------
    artist:
        Display artist name.
    title:
        Display album title.
    source_url:
        Album page on the metadata source.
    cover_url:
        "Large" cover image URL.
    """

    artist: str
    title: str
    source_url: str = ""
    cover_url: str = ""

    @property
    def has_natural_key(self) -> bool:
        return bool(self.artist.strip()) and bool(self.title.strip())


@dataclass(frozen=True)
class AlbumEnrichment:
    """Extra descriptive data for one album, or nothing.

    Attributes
    ----------
    summary:
        Raw wiki summary.  May still contain HTML markup.
    published:
        Raw publication string, e.g. ``"27 Jul 2008, 14:23"``.
    tags:
        Tag names in source order.
    """

    summary: str = ""
    published: str = ""
    tags: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.summary or self.published or self.tags)


# Concrete implementation: LastFmProvider (src/providers/music_db/)
class IAlbumMetadataProvider(ABC):
    """Contract for album-metadata sources used by the ingestion loop.

    Neither method raises for source-side problems.  A failed listing is an
    empty list and a failed enrichment is an empty :class:`AlbumEnrichment`,
    so one bad tag or album never aborts a sweep.
    """

    @abstractmethod
    async def fetch_top_albums(self, tag: str, page: int = 1) -> list[AlbumCandidate]:
        """Return the candidate albums on *page* of *tag*'s top-albums list.

        Parameters
        ----------
        tag:
            Non-empty genre / topic tag, e.g. ``"jazz"``.
        page:
            1-based page number.

        Returns
        -------
        list[AlbumCandidate]
            Candidates in source order.  Entries missing an artist or title
            are dropped.  Empty on any failure.
        """

    @abstractmethod
    async def fetch_album_details(self, artist: str, title: str) -> AlbumEnrichment:
        """Return enrichment for one album, or an empty enrichment on failure."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"lastfm"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (credentials present)."""
