from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from charaanime.logic.exceptions import ProviderError
from charaanime.logic.service import DEFAULT_LIST_NAMES, CatalogProvider
from charaanime.logic.types import AnimeEntry, CatalogResult, Studio

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = structlog.get_logger()

ANILIST_URL = "https://graphql.anilist.co"

USER_ANIME_LIST_QUERY = """
query ($userName: String) {
  MediaListCollection(userName: $userName, type: ANIME) {
    lists {
      name
      entries {
        media {
          id
          idMal
          title { romaji english }
          synonyms
          coverImage { large extraLarge }
          genres
          tags { name }
          episodes
          seasonYear
          season
          format
          description
          studios { nodes { id name isAnimationStudio } }
          relations { nodes { id type } }
        }
      }
    }
  }
}
"""


def _alt_names(media: dict[str, Any]) -> tuple[str, ...]:
    """Lowercased romaji and synonyms, then the English title lowercased and as-is."""
    title = media.get("title") or {}
    names = [title["romaji"].lower()]
    names.extend(s.lower() for s in media.get("synonyms") or [])
    english = title.get("english")
    if english:
        names.append(english.lower())
        names.append(english)
    return tuple(names)


def _animation_studios(media: dict[str, Any]) -> tuple[Studio, ...]:
    studios: list[Studio] = []
    seen: set[int] = set()
    for node in (media.get("studios") or {}).get("nodes") or []:
        if node.get("isAnimationStudio") and node["id"] not in seen:
            studios.append(Studio(id=node["id"], name=node["name"], is_animation_studio=True))
            seen.add(node["id"])
    return tuple(studios)


def _related_ids(media: dict[str, Any]) -> tuple[int, ...]:
    nodes = (media.get("relations") or {}).get("nodes") or []
    return tuple(node["id"] for node in nodes if node.get("type") in (None, "ANIME"))


def format_media(media: dict[str, Any], *, tags_limit: int | None = None) -> AnimeEntry:
    """Convert an AniList media object into an AnimeEntry."""
    title = media.get("title") or {}
    tags = [tag["name"] for tag in media.get("tags") or []]
    if tags_limit and tags_limit > 0:
        tags = tags[:tags_limit]
    cover = media.get("coverImage") or {}
    return AnimeEntry(
        id=media["id"],
        id_mal=media.get("idMal"),
        name=title["romaji"],
        english_name=title.get("english"),
        alt_names=_alt_names(media),
        image=cover.get("large") or "",
        image_large=cover.get("extraLarge"),
        genres=tuple(media.get("genres") or ()),
        tags=tuple(tags),
        episodes=media.get("episodes"),
        season_year=media.get("seasonYear"),
        season=media.get("season"),
        format=media.get("format"),
        description=media.get("description"),
        studios=_animation_studios(media),
        related_ids=_related_ids(media),
    )


def format_animes(
    collection: dict[str, Any] | None,
    list_names: Sequence[str] = DEFAULT_LIST_NAMES,
    *,
    tags_limit: int | None = None,
) -> list[AnimeEntry]:
    """Return the entries of the first list in ``collection`` named in ``list_names``."""
    if not collection or not list_names:
        return []
    for media_list in collection.get("lists") or []:
        if media_list.get("name") in list_names:
            return [format_media(entry["media"], tags_limit=tags_limit) for entry in media_list.get("entries") or []]
    return []


def format_catalog(collection: dict[str, Any] | None, *, tags_limit: int | None = None) -> list[AnimeEntry]:
    """Return every entry across all lists, first occurrence of each id."""
    if not collection:
        return []
    entries: list[AnimeEntry] = []
    seen: set[int] = set()
    for media_list in collection.get("lists") or []:
        for entry in media_list.get("entries") or []:
            media = entry["media"]
            if media["id"] in seen:
                continue
            entries.append(format_media(media, tags_limit=tags_limit))
            seen.add(media["id"])
    return entries


class AniListCatalogProvider(CatalogProvider):
    """Catalog provider backed by the AniList GraphQL API."""

    def __init__(self, url: str = ANILIST_URL, timeout: float = 10.0) -> None:
        self._url = url
        self._timeout = timeout

    async def get_user_anime_list(
        self,
        user: str,
        list_names: Sequence[str] = DEFAULT_LIST_NAMES,
        *,
        tags_limit: int | None = None,
    ) -> CatalogResult:
        collection = await self._fetch_collection(user)
        try:
            pool = format_animes(collection, list_names, tags_limit=tags_limit)
            catalog = format_catalog(collection, tags_limit=tags_limit)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise ProviderError(f"Malformed AniList response for user {user!r}: {e}") from e
        logger.info("catalog loaded", user=user, pool=len(pool), catalog=len(catalog))
        return CatalogResult(user=user, pool=tuple(pool), catalog=tuple(catalog))

    async def _fetch_collection(self, user: str) -> dict[str, Any] | None:
        payload = {"query": USER_ANIME_LIST_QUERY, "variables": {"userName": user}}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(self._url, json=payload)
            except httpx.RequestError as e:
                raise ProviderError(f"Failed to connect to AniList: {e}") from e

        if response.status_code == HTTPStatus.NOT_FOUND:
            raise ProviderError(f"AniList user {user!r} not found")
        if response.status_code != HTTPStatus.OK:
            raise ProviderError(f"AniList request failed with status {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(f"AniList returned a non-JSON response: {e}") from e
        if not isinstance(body, dict):
            raise ProviderError("AniList returned an unexpected payload")
        if body.get("errors"):
            raise ProviderError(f"AniList error: {body['errors'][0].get('message', 'unknown error')}")
        return (body.get("data") or {}).get("MediaListCollection")
