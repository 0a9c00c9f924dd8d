"""Guess evaluation and the valid-answer pool of a round."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from charaanime.logic.types import AnimeEntry


def matches_anime(candidate: AnimeEntry, answer: AnimeEntry) -> bool:
    """Check whether a guessed anime identifies ``answer``.

    Fields are compared in order: AniList id, MyAnimeList id, English title,
    display title. Missing ids and titles never match each other. Title
    comparison is exact and case-sensitive.
    """
    if candidate.id == answer.id:
        return True
    if candidate.id_mal is not None and candidate.id_mal == answer.id_mal:
        return True
    if candidate.english_name and answer.english_name and candidate.english_name == answer.english_name:
        return True
    return candidate.name == answer.name


def is_correct_guess(candidate: AnimeEntry, answers: Iterable[AnimeEntry]) -> bool:
    return any(matches_anime(candidate, answer) for answer in answers)


def valid_answers(anime: AnimeEntry, catalog: Mapping[int, AnimeEntry]) -> tuple[AnimeEntry, ...]:
    """Return ``anime`` followed by every catalog entry related to it.

    Sequels, prequels and other related media the user has listed are accepted
    as correct answers.
    """
    answers = [anime]
    seen = {anime.id}
    for related_id in anime.related_ids:
        related = catalog.get(related_id)
        if related is not None and related.id not in seen:
            answers.append(related)
            seen.add(related.id)
    return tuple(answers)
