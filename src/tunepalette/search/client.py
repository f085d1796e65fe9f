"""Remote music catalog client (Spotify-compatible Web API).

Handles the client-credentials token exchange, the ``/search`` call with
retry, and the mapping of validated payloads onto ``RawResult``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import aiohttp
from pydantic import BaseModel, ValidationError

from tunepalette import constants
from tunepalette.exceptions import GatewayError
from tunepalette.models import RawResult, ResultType
from tunepalette.rx_ops import await_first, with_retries
from tunepalette.search.schemas import (
    Album,
    Artist,
    Image,
    Page,
    Playlist,
    SearchResponse,
    TokenResponse,
    Track,
)

logger = logging.getLogger(__name__)

SEARCH_TYPES = "track,artist,album,playlist"

# Refresh the token this many seconds before the server-declared expiry.
TOKEN_EXPIRY_MARGIN = 30


def _first_image(images: list[Image] | None) -> str | None:
    return images[0].url if images else None


def _joined_artists(artists: list) -> str:
    return ", ".join(a.name for a in artists)


def _track_result(track: Track) -> RawResult:
    return RawResult(
        id=track.id,
        type=ResultType.TRACK,
        title=track.name,
        subtitle=_joined_artists(track.artists),
        image=_first_image(track.album.images) if track.album else None,
        payload=track.model_dump(mode="json"),
        related=True,
    )


def _artist_result(artist: Artist) -> RawResult:
    subtitle = ", ".join(artist.genres[:2]).title() if artist.genres else "Artist"
    return RawResult(
        id=artist.id,
        type=ResultType.ARTIST,
        title=artist.name,
        subtitle=subtitle,
        image=_first_image(artist.images),
        payload=artist.model_dump(mode="json"),
        related=True,
    )


def _album_result(album: Album) -> RawResult:
    return RawResult(
        id=album.id,
        type=ResultType.ALBUM,
        title=album.name,
        subtitle=_joined_artists(album.artists),
        image=_first_image(album.images),
        payload=album.model_dump(mode="json"),
        related=True,
    )


def _playlist_result(playlist: Playlist) -> RawResult:
    owner = (playlist.owner.display_name or playlist.owner.id) if playlist.owner else None
    return RawResult(
        id=playlist.id,
        type=ResultType.PLAYLIST,
        title=playlist.name,
        subtitle=f"By {owner}" if owner else "Playlist",
        image=_first_image(playlist.images),
        payload=playlist.model_dump(mode="json"),
        related=True,
    )


_MAPPERS: list[tuple[str, type[BaseModel], Any]] = [
    ("tracks", Track, _track_result),
    ("artists", Artist, _artist_result),
    ("albums", Album, _album_result),
    ("playlists", Playlist, _playlist_result),
]


def parse_search_response(data: dict) -> list[RawResult]:
    """Validate a ``/search`` payload and map it to RawResults.

    Output order is tracks, artists, albums, playlists, each in upstream
    order. Null items and items failing validation are skipped.

    Raises:
        GatewayError: If the payload's top-level shape is invalid.
    """
    try:
        response = SearchResponse.model_validate(data)
    except ValidationError as e:
        raise GatewayError(f"Malformed search response: {e}") from e

    results: list[RawResult] = []
    for attr, model, mapper in _MAPPERS:
        page: Page | None = getattr(response, attr)
        if page is None:
            continue
        for item in page.items:
            if item is None:
                continue
            try:
                results.append(mapper(model.model_validate(item)))
            except ValidationError as e:
                logger.debug("Skipping invalid %s item: %s", attr, e)
    return results


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, GatewayError):
        return exc.status is None or exc.status in (401, 429) or exc.status >= 500
    return isinstance(exc, (aiohttp.ClientError, asyncio.TimeoutError))


class CatalogSearchClient:
    """Async client for the catalog's search endpoint.

    A single ``aiohttp.ClientSession`` is created lazily and reused;
    call ``close()`` (or use ``async with``) when done.

    Usage::

        async with CatalogSearchClient(client_id, client_secret) as client:
            results = await client.search_with_retry("arctic")
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        api_base_url: str = constants.DEFAULT_API_BASE_URL,
        auth_url: str = constants.DEFAULT_AUTH_URL,
        limit: int = constants.SEARCH_LIMIT,
        market: str | None = None,
        timeout_seconds: float = constants.SEARCH_TIMEOUT_SECONDS,
        max_retries: int = constants.SEARCH_RETRIES,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._api_base_url = api_base_url.rstrip("/")
        self._auth_url = auth_url
        self._limit = limit
        self._market = market
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._max_retries = max_retries
        self._session = session
        self._owns_session = session is None
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    async def __aenter__(self) -> CatalogSearchClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def _access_token(self) -> str:
        """Return a cached bearer token, exchanging credentials when expired."""
        async with self._token_lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            session = self._get_session()
            async with session.post(
                self._auth_url,
                data={"grant_type": "client_credentials"},
                auth=aiohttp.BasicAuth(self._client_id, self._client_secret),
            ) as response:
                if response.status != 200:
                    raise GatewayError(
                        f"Token request failed with HTTP {response.status}",
                        status=response.status,
                    )
                try:
                    token = TokenResponse.model_validate(await response.json())
                except ValidationError as e:
                    raise GatewayError(f"Malformed token response: {e}") from e

            self._token = token.access_token
            self._token_expires_at = (
                time.monotonic() + token.expires_in - TOKEN_EXPIRY_MARGIN
            )
            logger.debug("Obtained catalog token, expires in %ds", token.expires_in)
            return self._token

    async def search(self, query: str) -> list[RawResult]:
        """Run one search request (no retry).

        Raises:
            GatewayError: On HTTP errors or malformed payloads.
            aiohttp.ClientError: On transport failures.
        """
        token = await self._access_token()
        params: dict[str, str | int] = {
            "q": query,
            "type": SEARCH_TYPES,
            "limit": self._limit,
        }
        if self._market:
            params["market"] = self._market

        session = self._get_session()
        started = time.monotonic()
        async with session.get(
            f"{self._api_base_url}/search",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        ) as response:
            if response.status == 401:
                self._token = None
                raise GatewayError("Catalog token rejected", status=401)
            if response.status == 429:
                retry_after = float(response.headers.get("Retry-After", "1"))
                if retry_after > constants.MAX_RETRY_AFTER_SECONDS:
                    raise GatewayError(
                        f"Rate limited for {retry_after:.0f}s", status=429
                    )
                await asyncio.sleep(retry_after)
                raise GatewayError("Rate limited", status=429)
            if response.status >= 400:
                raise GatewayError(
                    f"Search failed with HTTP {response.status}",
                    status=response.status,
                )
            data = await response.json()

        results = parse_search_response(data)
        logger.debug(
            "Catalog search q=%r returned %d items in %.0fms",
            query,
            len(results),
            (time.monotonic() - started) * 1000,
        )
        return results

    async def search_with_retry(self, query: str) -> list[RawResult]:
        """Search with exponential-backoff retry on transient failures.

        Raises:
            GatewayError: After retries are exhausted. Transport errors are
                wrapped so callers only ever see GatewayError.
        """
        obs = with_retries(
            lambda: self.search(query),
            max_retries=self._max_retries,
            base_delay=0.25,
            should_retry=_is_retryable,
        )
        try:
            return await await_first(obs)
        except GatewayError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise GatewayError(f"Catalog unreachable: {e!r}") from e
