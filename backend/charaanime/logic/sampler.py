"""
Character sampling for a round.

Given every character of one anime, choose ``target`` of them so that the
cards go from obscure to iconic: ``target - 1`` supporting characters spread
across the popularity range (ascending by favorites), then one main character
last. Result is always either exactly ``target`` characters or empty.

Two paths:
1. Sparse: too few supporting characters to spread. Take all of them and top
   up with distinct random main characters.
2. Stratified: split the supporting favorites range into ``target - 1``
   equal-width buckets and pick one character per non-empty bucket, filling
   gaps from the leftover supporting characters.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from charaanime.logic.enums import CharacterRole

if TYPE_CHECKING:
    from collections.abc import Sequence

    from charaanime.logic.types import CharacterRecord

NUM_CHARACTERS = 4
MAX_MAIN_DRAWS = 10  # random draws from the main pool in the sparse path


def _by_favorites(character: CharacterRecord) -> int:
    return character.favorites


def sample_characters(
    characters: Sequence[CharacterRecord],
    target: int = NUM_CHARACTERS,
    rng: random.Random | None = None,
) -> list[CharacterRecord]:
    """Return ``target`` popularity-stratified characters, or [] if the pool is unusable."""
    if target < 2:  # noqa: PLR2004
        raise ValueError(f"target must be at least 2, got {target}")
    if rng is None:
        rng = random.Random()  # noqa: S311
    if len(characters) < target:
        return []

    usable = [c for c in characters if not c.has_placeholder_image]
    supporting = [c for c in usable if c.role == CharacterRole.SUPPORTING]
    main = [c for c in usable if c.role == CharacterRole.MAIN]

    if len(supporting) < target - 1:
        return _sample_sparse(supporting, main, target, rng)
    return _sample_stratified(supporting, main, target, rng)


def _sample_sparse(
    supporting: list[CharacterRecord],
    main: list[CharacterRecord],
    target: int,
    rng: random.Random,
) -> list[CharacterRecord]:
    if len(main) < target - len(supporting):
        return []

    chosen = list(supporting)
    chosen_ids = {c.mal_id for c in chosen}
    tries = 0
    while len(chosen) < target and tries < MAX_MAIN_DRAWS:
        candidate = rng.choice(main)
        if candidate.mal_id not in chosen_ids:
            chosen.append(candidate)
            chosen_ids.add(candidate.mal_id)
        tries += 1

    if len(chosen) < target:
        return []
    return sorted(chosen, key=_by_favorites)


def _sample_stratified(
    supporting: list[CharacterRecord],
    main: list[CharacterRecord],
    target: int,
    rng: random.Random,
) -> list[CharacterRecord]:
    if not main:
        return []

    supporting = sorted(supporting, key=_by_favorites)
    slots = target - 1
    min_favorites = supporting[0].favorites
    max_favorites = supporting[-1].favorites
    bucket_width = (max_favorites - min_favorites) / slots

    # indices into `supporting`; buckets are disjoint so picks never repeat
    picked: list[int] = []
    for i in range(slots):
        bucket_min = min_favorites + i * bucket_width
        bucket_max = bucket_min + bucket_width
        bucket = [idx for idx, c in enumerate(supporting) if bucket_min <= c.favorites < bucket_max]
        if bucket:
            picked.append(rng.choice(bucket))

    remaining = [idx for idx in range(len(supporting)) if idx not in picked]
    while len(picked) < slots and remaining:
        idx = rng.choice(remaining)
        picked.append(idx)
        remaining.remove(idx)

    if len(picked) < slots:
        return []

    chosen = sorted((supporting[idx] for idx in picked), key=_by_favorites)
    chosen.append(rng.choice(main))
    return chosen
