"""Deterministic album identity.

An album's id is a content address: the MD5 digest of its normalised natural
key ``"{artist}|{title}"`` read as a 128-bit UUID.  Ingesting the same album
twice, from a sweep or from the seed catalog, always lands on the same
record.

MD5 is used for its fixed 128-bit width, not for security.  Collisions are
tolerated in practice but not ruled out; this is an ingestion key, not an
integrity check.
"""

from __future__ import annotations

import hashlib
import uuid

from src.utils.text_normalizer import normalize_key_part

KEY_SEPARATOR = "|"


def natural_key(artist: str, title: str) -> str:
    """Return the normalised ``artist|title`` key for an album."""
    return f"{normalize_key_part(artist)}{KEY_SEPARATOR}{normalize_key_part(title)}"


def album_id(artist: str, title: str) -> uuid.UUID:
    """Return the deterministic UUID for ``(artist, title)``."""
    digest = hashlib.md5(natural_key(artist, title).encode("utf-8")).digest()
    return uuid.UUID(bytes=digest)
