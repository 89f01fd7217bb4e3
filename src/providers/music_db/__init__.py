"""Album-metadata provider implementations.

    LastFmProvider -- Last.fm web API (requires LASTFM_API_KEY).  Supplies
    candidate albums per genre tag (``tag.gettopalbums``) and best-effort
    album details (``album.getinfo``).
"""

from src.providers.music_db.lastfm_provider import LastFmProvider

__all__ = ["LastFmProvider"]
