"""Builders for catalog and character test data."""

import random
from typing import TYPE_CHECKING

from charaanime.logic.enums import CharacterRole
from charaanime.logic.types import AnimeEntry, CatalogResult, CharacterRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

MAL_ID_OFFSET = 1000
PLACEHOLDER_URL = "https://cdn.myanimelist.net/images/questionmark_23.gif"


def make_anime(
    anime_id: int,
    name: str | None = None,
    *,
    id_mal: int | None = -1,
    english_name: str | None = None,
    related_ids: "Sequence[int]" = (),
) -> AnimeEntry:
    """Create an AnimeEntry; the MAL id defaults to ``anime_id + 1000``."""
    if id_mal == -1:
        id_mal = anime_id + MAL_ID_OFFSET
    name = name if name is not None else f"Anime {anime_id}"
    return AnimeEntry(
        id=anime_id,
        id_mal=id_mal,
        name=name,
        english_name=english_name,
        alt_names=(name.lower(),),
        image=f"https://img.test/{anime_id}.jpg",
        related_ids=tuple(related_ids),
    )


def make_character(
    mal_id: int,
    role: CharacterRole = CharacterRole.SUPPORTING,
    favorites: int = 0,
    *,
    placeholder: bool = False,
) -> CharacterRecord:
    image_url = PLACEHOLDER_URL if placeholder else f"https://img.test/c/{mal_id}.jpg"
    return CharacterRecord(
        mal_id=mal_id,
        name=f"Character {mal_id}",
        role=role,
        favorites=favorites,
        image_url=image_url,
        webp_image_url=image_url.replace(".jpg", ".webp"),
    )


def make_cast(
    supporting_favorites: "Sequence[int]" = (10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
    main_favorites: "Sequence[int]" = (5000, 9000),
    *,
    first_id: int = 1,
) -> list[CharacterRecord]:
    """Create a cast of supporting then main characters with consecutive MAL ids."""
    cast = [
        make_character(first_id + i, CharacterRole.SUPPORTING, fav) for i, fav in enumerate(supporting_favorites)
    ]
    offset = first_id + len(cast)
    cast.extend(make_character(offset + i, CharacterRole.MAIN, fav) for i, fav in enumerate(main_favorites))
    return cast


def make_catalog(count: int, user: str = "tester") -> CatalogResult:
    animes = tuple(make_anime(i) for i in range(1, count + 1))
    return CatalogResult(user=user, pool=animes, catalog=animes)


class FirstChoiceRandom(random.Random):
    """Random whose choice() always returns the first element."""

    def choice(self, seq):  # noqa: ANN001, ANN201
        return seq[0]
