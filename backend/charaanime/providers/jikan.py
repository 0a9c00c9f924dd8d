from __future__ import annotations

from http import HTTPStatus
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from charaanime.logic.exceptions import ProviderError
from charaanime.logic.service import CharacterProvider
from charaanime.logic.types import CharacterRecord

logger = structlog.get_logger()

JIKAN_URL = "https://api.jikan.moe/v4"


def format_character(item: dict[str, Any]) -> CharacterRecord:
    """Convert one entry of Jikan's ``/anime/{id}/characters`` data into a CharacterRecord."""
    character = item["character"]
    images = character.get("images") or {}
    return CharacterRecord(
        mal_id=character["mal_id"],
        name=character.get("name") or "",
        role=item.get("role"),
        favorites=item.get("favorites") or 0,
        image_url=(images.get("jpg") or {}).get("image_url") or "",
        webp_image_url=(images.get("webp") or {}).get("image_url") or "",
    )


class JikanCharacterProvider(CharacterProvider):
    """Character provider backed by the Jikan (MyAnimeList) REST API."""

    def __init__(self, url: str = JIKAN_URL, timeout: float = 10.0) -> None:
        self._url = url.rstrip("/")
        self._timeout = timeout

    async def get_characters(self, id_mal: int) -> list[CharacterRecord]:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.get(f"{self._url}/anime/{id_mal}/characters")
            except httpx.RequestError as e:
                raise ProviderError(f"Failed to connect to Jikan: {e}") from e

        if response.status_code == HTTPStatus.NOT_FOUND:
            logger.info("anime not found on jikan", id_mal=id_mal)
            return []
        if response.status_code != HTTPStatus.OK:
            raise ProviderError(f"Jikan request for anime {id_mal} failed with status {response.status_code}")

        try:
            data = response.json().get("data") or []
            return [format_character(item) for item in data]
        except (ValueError, KeyError, TypeError, AttributeError, ValidationError) as e:
            raise ProviderError(f"Malformed Jikan response for anime {id_mal}: {e}") from e
