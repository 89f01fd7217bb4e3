"""cratedigger domain models.

    - album.py  -- AlbumRecord, the stored / searched unit
    - lastfm.py -- partial models of the Last.fm responses we consume
"""

from __future__ import annotations

from src.models.album import AlbumRecord

__all__ = ["AlbumRecord"]
