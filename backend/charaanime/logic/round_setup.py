"""Select the anime and characters of the next round."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from charaanime.logic.exceptions import RoundSetupError
from charaanime.logic.sampler import NUM_CHARACTERS, sample_characters

if TYPE_CHECKING:
    import random
    from collections.abc import Collection, Iterable, Sequence

    from charaanime.logic.service import CharacterProvider
    from charaanime.logic.types import AnimeEntry, CharacterRecord

logger = structlog.get_logger()

DEFAULT_MAX_SETUP_ATTEMPTS = 20


@dataclass(frozen=True)
class RoundSetup:
    """Anime and sampled characters of a round that is ready to play."""

    anime: AnimeEntry
    characters: tuple[CharacterRecord, ...]


def eligible_pool(entries: Iterable[AnimeEntry]) -> tuple[AnimeEntry, ...]:
    """Return the entries that can be used as round answers.

    Characters are looked up by MyAnimeList id, so entries without one are
    dropped. Duplicate AniList ids keep their first occurrence.
    """
    pool: list[AnimeEntry] = []
    seen: set[int] = set()
    for entry in entries:
        if entry.id_mal is None or entry.id in seen:
            continue
        pool.append(entry)
        seen.add(entry.id)
    return tuple(pool)


def pick_random_anime(
    pool: Sequence[AnimeEntry],
    exclude_ids: Collection[int],
    rng: random.Random,
) -> AnimeEntry | None:
    """Uniformly pick one anime not in ``exclude_ids``, or None if none is left."""
    candidates = [anime for anime in pool if anime.id not in exclude_ids]
    if not candidates:
        return None
    return rng.choice(candidates)


async def setup_round(
    pool: Sequence[AnimeEntry],
    exclude_ids: Collection[int],
    character_provider: CharacterProvider,
    rng: random.Random,
    *,
    num_characters: int = NUM_CHARACTERS,
    max_attempts: int = DEFAULT_MAX_SETUP_ATTEMPTS,
) -> RoundSetup | None:
    """Pick an anime and sample its characters, retrying on unusable anime.

    An anime whose characters cannot be sampled is discarded and another one
    is picked from the same pool; it is not excluded, so it may come up again.
    Returns None when every anime is excluded.
    Raises RoundSetupError after ``max_attempts`` unusable picks.
    """
    for attempt in range(1, max_attempts + 1):
        anime = pick_random_anime(pool, exclude_ids, rng)
        if anime is None:
            logger.info("no anime left to pick", excluded=len(exclude_ids))
            return None

        # eligible_pool guarantees a MAL id
        characters = await character_provider.get_characters(anime.id_mal)  # type: ignore[arg-type]
        sampled = sample_characters(characters, num_characters, rng)
        if len(sampled) >= num_characters:
            logger.debug("round anime selected", anime_id=anime.id, attempt=attempt)
            return RoundSetup(anime=anime, characters=tuple(sampled))

        logger.info(
            "anime has too few usable characters, picking another",
            anime_id=anime.id,
            characters=len(characters),
            attempt=attempt,
        )

    logger.warning("round setup exhausted", attempts=max_attempts)
    raise RoundSetupError(max_attempts)
