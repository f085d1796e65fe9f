"""Pydantic models for the remote catalog's search response.

Only the fields the palette displays or needs for activation are
declared; everything else in the payload is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _CatalogModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Image(_CatalogModel):
    url: str
    width: int | None = None
    height: int | None = None


class ArtistRef(_CatalogModel):
    id: str
    name: str
    uri: str | None = None


class AlbumRef(_CatalogModel):
    id: str
    name: str
    uri: str | None = None
    images: list[Image] = Field(default_factory=list)


class Track(_CatalogModel):
    id: str
    name: str
    uri: str | None = None
    duration_ms: int | None = None
    explicit: bool = False
    preview_url: str | None = None
    artists: list[ArtistRef] = Field(default_factory=list)
    album: AlbumRef | None = None


class Album(_CatalogModel):
    id: str
    name: str
    uri: str | None = None
    album_type: str | None = None
    release_date: str | None = None
    total_tracks: int | None = None
    artists: list[ArtistRef] = Field(default_factory=list)
    images: list[Image] = Field(default_factory=list)


class Artist(_CatalogModel):
    id: str
    name: str
    uri: str | None = None
    genres: list[str] = Field(default_factory=list)
    images: list[Image] = Field(default_factory=list)


class Owner(_CatalogModel):
    id: str
    display_name: str | None = None


class Playlist(_CatalogModel):
    id: str
    name: str
    uri: str | None = None
    description: str | None = None
    owner: Owner | None = None
    images: list[Image] | None = None


class Page(_CatalogModel):
    """A paged list; the API sends null for unavailable items."""

    items: list[dict | None] = Field(default_factory=list)
    total: int = 0


class SearchResponse(_CatalogModel):
    tracks: Page | None = None
    artists: Page | None = None
    albums: Page | None = None
    playlists: Page | None = None


class TokenResponse(_CatalogModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3600
