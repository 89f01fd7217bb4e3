"""Build the text that gets embedded for an album.

The description is the only input to the embedding model, so it decides
where an album lands in vector space.  When Last.fm has a wiki summary we
compose a rich description (era, genre tags, summary).  Otherwise we fall
back to a template built from the sweep's tag, which at least pulls the
album towards its genre neighbourhood.
"""

from __future__ import annotations

import re

from src.interfaces.music_db_provider import AlbumCandidate, AlbumEnrichment

_YEAR_RE = re.compile(r"\b(19|20)\d{2}\b")
_LINK_MARKER = "<a href"
MAX_GENRES = 7


def clean_summary(summary: str) -> str:
    """Cut *summary* at its first ``<a href`` and trim.

    Last.fm summaries end with a "Read more on Last.fm" anchor; anything
    from the first anchor onwards is dropped.
    """
    index = summary.find(_LINK_MARKER)
    if index >= 0:
        summary = summary[:index]
    return summary.strip()


def extract_year(published: str) -> str:
    """Return the first 19xx/20xx year in *published*, or ``""``."""
    match = _YEAR_RE.search(published or "")
    return match.group(0) if match else ""


def fallback_description(tag: str, artist: str, title: str) -> str:
    return (
        f"{artist} - {title}. Music style and genre: {tag}. "
        f"A {tag} album with {tag} vibes and influences."
    )


def build_description(
    tag: str,
    candidate: AlbumCandidate,
    enrichment: AlbumEnrichment | None,
) -> str:
    """Return the embedding text for *candidate* found under *tag*.

    Raises:
        ValueError: If the candidate has no artist or title.
    """
    artist = candidate.artist.strip()
    title = candidate.title.strip()
    if not artist or not title:
        raise ValueError("cannot describe an album without artist and title")

    summary = clean_summary(enrichment.summary) if enrichment else ""
    if not summary:
        return fallback_description(tag, artist, title)

    year = extract_year(enrichment.published)
    era = f"Released in {year}. " if year else ""
    genres = ", ".join([t for t in enrichment.tags if t.strip()][:MAX_GENRES])
    return f"{artist} - {title}. {era}Genres and styles: {genres}. {summary}".strip()
