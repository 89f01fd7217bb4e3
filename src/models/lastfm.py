"""Typed, partial models of the two Last.fm responses we consume.

Every field is optional: a field that Last.fm left out is ``None`` (or an
empty list), never a ``KeyError`` at the call site.  The ``mode="before"``
validators absorb Last.fm's known JSON quirks:

* a one-element array is sometimes sent as a bare object
  (``"tag": {"name": "jazz"}``), so bare objects are wrapped in a list;
* ``"tags": ""`` is sent instead of an object when an album has no tags;
* errors can arrive with HTTP 200 as ``{"error": 6, "message": "..."}``;
* ``artist`` is an object in ``tag.gettopalbums`` but a plain string in
  ``album.getinfo``.

Top-album entries are kept raw on :class:`TopAlbumsBlock` and validated one
at a time by the provider, so one broken entry does not discard the page.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_LENIENT = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


def _as_list(value: Any) -> list[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return value
    return []


def _as_object(value: Any) -> Any:
    return value if isinstance(value, dict) else None


class LastFmImage(BaseModel):
    """One entry of an ``image`` array; index 2 is the "large" size."""

    model_config = _LENIENT

    url: str | None = Field(default=None, alias="#text")
    size: str | None = None


class LastFmArtistRef(BaseModel):
    model_config = _LENIENT

    name: str | None = None
    url: str | None = None


class TopAlbumEntry(BaseModel):
    """One album from ``tag.gettopalbums``."""

    model_config = _LENIENT

    name: str | None = None
    url: str | None = None
    artist: LastFmArtistRef | None = None
    image: list[LastFmImage] = Field(default_factory=list)

    @field_validator("artist", mode="before")
    @classmethod
    def _artist_ref(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"name": value}
        return _as_object(value)

    @field_validator("image", mode="before")
    @classmethod
    def _images(cls, value: Any) -> list[Any]:
        # Keep positions stable: a junk entry becomes an empty image, not a gap.
        return [item if isinstance(item, dict) else {} for item in _as_list(value)]


class TopAlbumsBlock(BaseModel):
    model_config = _LENIENT

    album: list[dict[str, Any]] | None = None

    @field_validator("album", mode="before")
    @classmethod
    def _albums(cls, value: Any) -> Any:
        if value is None:
            return None
        return [item for item in _as_list(value) if isinstance(item, dict)]


class TopAlbumsResponse(BaseModel):
    """Envelope of ``tag.gettopalbums``."""

    model_config = _LENIENT

    albums: TopAlbumsBlock | None = None
    error: int | None = None
    message: str | None = None

    @field_validator("albums", mode="before")
    @classmethod
    def _block(cls, value: Any) -> Any:
        return _as_object(value)


class AlbumTag(BaseModel):
    model_config = _LENIENT

    name: str | None = None


class AlbumTags(BaseModel):
    model_config = _LENIENT

    tag: list[AlbumTag] = Field(default_factory=list)

    @field_validator("tag", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> list[Any]:
        return [item for item in _as_list(value) if isinstance(item, dict)]


class AlbumWiki(BaseModel):
    model_config = _LENIENT

    summary: str | None = None
    published: str | None = None


class AlbumInfo(BaseModel):
    """The ``album`` object of ``album.getinfo``."""

    model_config = _LENIENT

    name: str | None = None
    artist: str | None = None
    wiki: AlbumWiki | None = None
    tags: AlbumTags | None = None

    @field_validator("artist", mode="before")
    @classmethod
    def _artist_name(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("name")
        return value

    @field_validator("wiki", "tags", mode="before")
    @classmethod
    def _objects(cls, value: Any) -> Any:
        return _as_object(value)


class AlbumInfoResponse(BaseModel):
    """Envelope of ``album.getinfo``."""

    model_config = _LENIENT

    album: AlbumInfo | None = None
    error: int | None = None
    message: str | None = None

    @field_validator("album", mode="before")
    @classmethod
    def _album(cls, value: Any) -> Any:
        return _as_object(value)
