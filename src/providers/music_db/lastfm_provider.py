"""Last.fm provider implementing IAlbumMetadataProvider.

Uses two public Last.fm methods over plain HTTP/JSON:

* ``tag.gettopalbums`` -- candidate albums for a genre tag, one page at a time;
* ``album.getinfo``    -- wiki summary, publication date and tags for one album.

Both degrade to "no data" instead of raising: non-2xx statuses, transport
errors, undecodable JSON, unexpected shapes and Last.fm error payloads are
logged and swallowed here so that a flaky source never aborts a sweep.  The
``httpx.AsyncClient`` is injected for testability and shared with the rest
of the worker.
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from src.interfaces.music_db_provider import (
    AlbumCandidate,
    AlbumEnrichment,
    IAlbumMetadataProvider,
)
from src.models.lastfm import AlbumInfoResponse, TopAlbumEntry, TopAlbumsResponse
from src.utils.errors import MalformedResponseError, TransportError
from src.utils.logging import get_logger
from src.utils.text_normalizer import clean_display

DEFAULT_BASE_URL = "http://ws.audioscrobbler.com/2.0/"
_USER_AGENT = "cratedigger/0.1.0"
_LARGE_IMAGE_INDEX = 2  # image[] is small, medium, large, extralarge

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class LastFmProvider(IAlbumMetadataProvider):
    """Album-metadata provider backed by the Last.fm web API.

    Parameters
    ----------
    http_client:
        Shared async HTTP client.
    api_key:
        Last.fm API key.  Never logged.
    base_url:
        API root, ``http://ws.audioscrobbler.com/2.0/`` by default.
    page_size:
        ``limit`` sent with ``tag.gettopalbums``.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        page_size: int = 5,
        timeout: float = 30.0,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url
        self._page_size = page_size
        self._timeout = timeout
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    async def _get_json(self, method: str, params: dict[str, Any]) -> Any:
        """Call one Last.fm *method* and return the decoded JSON body.

        Raises :class:`TransportError` or :class:`MalformedResponseError`.
        """
        query = {
            "method": method,
            **params,
            "api_key": self._api_key,
            "format": "json",
        }
        try:
            response = await self._http.get(
                self._base_url,
                params=query,
                headers={"User-Agent": _USER_AGENT},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                message=f"{method} request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not 200 <= response.status_code < 300:
            raise TransportError(
                message=f"{method} returned HTTP {response.status_code}",
                provider_name=self.get_provider_name(),
            )

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                message=f"{method} returned invalid JSON: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _parse(self, model: type[_ModelT], payload: Any, method: str) -> _ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError(
                message=f"{method} response has an unexpected shape: {exc.error_count()} error(s)",
                provider_name=self.get_provider_name(),
            ) from exc

    @staticmethod
    def _to_candidate(raw: dict[str, Any]) -> AlbumCandidate | None:
        """Map one raw top-albums entry, or ``None`` if it lacks a natural key."""
        try:
            entry = TopAlbumEntry.model_validate(raw)
        except ValidationError:
            return None

        artist = clean_display(entry.artist.name if entry.artist else None)
        title = clean_display(entry.name)
        if not artist or not title:
            return None

        cover_url = ""
        if len(entry.image) > _LARGE_IMAGE_INDEX:
            cover_url = (entry.image[_LARGE_IMAGE_INDEX].url or "").strip()

        return AlbumCandidate(
            artist=artist,
            title=title,
            source_url=(entry.url or "").strip(),
            cover_url=cover_url,
        )

    # -- IAlbumMetadataProvider implementation ---------------------------------

    async def fetch_top_albums(self, tag: str, page: int = 1) -> list[AlbumCandidate]:
        """Fetch one page of *tag*'s top albums; ``[]`` on any failure."""
        tag = tag.strip()
        if not tag:
            raise ValueError("tag must be a non-empty string")

        method = "tag.gettopalbums"
        try:
            payload = await self._get_json(
                method,
                {"tag": tag, "page": page, "limit": self._page_size},
            )
            response = self._parse(TopAlbumsResponse, payload, method)
        except (TransportError, MalformedResponseError) as exc:
            self._logger.warning("lastfm_top_albums_failed", tag=tag, page=page, error=str(exc))
            return []

        if response.error is not None:
            self._logger.warning(
                "lastfm_top_albums_error_payload",
                tag=tag,
                page=page,
                code=response.error,
                message=response.message,
            )
            return []

        if response.albums is None or response.albums.album is None:
            self._logger.info("lastfm_top_albums_empty", tag=tag, page=page)
            return []

        candidates: list[AlbumCandidate] = []
        for position, raw in enumerate(response.albums.album):
            candidate = self._to_candidate(raw)
            if candidate is None:
                self._logger.info("lastfm_candidate_skipped", tag=tag, page=page, position=position)
                continue
            candidates.append(candidate)

        self._logger.info(
            "lastfm_top_albums_fetched",
            tag=tag,
            page=page,
            result_count=len(candidates),
        )
        return candidates

    async def fetch_album_details(self, artist: str, title: str) -> AlbumEnrichment:
        """Fetch wiki summary, publication date and tags; empty on any failure."""
        if not artist.strip() or not title.strip():
            raise ValueError("artist and title are required for album details")

        method = "album.getinfo"
        try:
            payload = await self._get_json(method, {"artist": artist, "album": title})
            response = self._parse(AlbumInfoResponse, payload, method)
        except (TransportError, MalformedResponseError) as exc:
            self._logger.warning(
                "lastfm_album_details_failed",
                artist=artist,
                title=title,
                error=str(exc),
            )
            return AlbumEnrichment()
        except Exception as exc:
            # Enrichment is optional; nothing in here may abort a sweep.
            self._logger.warning(
                "lastfm_album_details_unexpected_error",
                artist=artist,
                title=title,
                error=str(exc),
            )
            return AlbumEnrichment()

        if response.error is not None or response.album is None:
            self._logger.info(
                "lastfm_album_details_missing",
                artist=artist,
                title=title,
                code=response.error,
            )
            return AlbumEnrichment()

        info = response.album
        wiki = info.wiki
        tags: tuple[str, ...] = ()
        if info.tags is not None:
            tags = tuple(
                name for name in (clean_display(t.name) for t in info.tags.tag) if name
            )

        return AlbumEnrichment(
            summary=(wiki.summary or "").strip() if wiki else "",
            published=(wiki.published or "").strip() if wiki else "",
            tags=tags,
        )

    def get_provider_name(self) -> str:
        return "lastfm"

    def is_available(self) -> bool:
        """Last.fm needs an API key; nothing else is checked here."""
        return bool(self._api_key.strip())
