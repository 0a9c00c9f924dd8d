"""
Unit tests for popularity-stratified character sampling.

Covers both sampling paths, placeholder filtering, ordering of the picked
cards and the all-or-nothing result size.
"""

import random

import pytest

from charaanime.logic.enums import CharacterRole
from charaanime.logic.sampler import NUM_CHARACTERS, sample_characters
from charaanime.tests.helpers import FirstChoiceRandom, make_cast, make_character


def _favorites(characters):
    return [c.favorites for c in characters]


class TestSampleCharactersGuards:
    def test_rejects_target_below_two(self):
        with pytest.raises(ValueError, match="at least 2"):
            sample_characters(make_cast(), target=1)

    def test_returns_empty_when_fewer_characters_than_target(self):
        cast = make_cast(supporting_favorites=(10, 20), main_favorites=())
        assert sample_characters(cast, rng=random.Random(1)) == []

    def test_returns_empty_for_no_characters(self):
        assert sample_characters([], rng=random.Random(1)) == []

    def test_placeholder_images_are_never_picked(self):
        cast = make_cast(supporting_favorites=(10, 20, 30, 40, 50, 60), main_favorites=(900,))
        cast.extend(make_character(100 + i, favorites=i * 5, placeholder=True) for i in range(10))
        for seed in range(20):
            picked = sample_characters(cast, rng=random.Random(seed))
            assert len(picked) == NUM_CHARACTERS
            assert not any(c.has_placeholder_image for c in picked)

    def test_placeholder_filtering_can_make_the_pool_unusable(self):
        cast = [make_character(i, favorites=i, placeholder=True) for i in range(1, 8)]
        cast.append(make_character(50, CharacterRole.MAIN, 1000))
        assert sample_characters(cast, rng=random.Random(3)) == []


class TestSampleCharactersStratified:
    def test_picks_one_supporting_per_bucket_then_a_main(self):
        # favorites 0..90 split into [0,30), [30,60), [60,90)
        cast = make_cast(supporting_favorites=tuple(range(0, 100, 10)), main_favorites=(5000, 7000))
        for seed in range(25):
            picked = sample_characters(cast, rng=random.Random(seed))

            assert len(picked) == NUM_CHARACTERS
            assert picked[0].favorites in {0, 10, 20}
            assert picked[1].favorites in {30, 40, 50}
            assert picked[2].favorites in {60, 70, 80}
            assert picked[3].role == CharacterRole.MAIN

    def test_supporting_cards_are_ascending_and_distinct(self):
        cast = make_cast(supporting_favorites=(3, 3, 8, 150, 151, 400, 2200), main_favorites=(10,))
        for seed in range(25):
            picked = sample_characters(cast, rng=random.Random(seed))
            supporting = picked[:-1]
            assert _favorites(supporting) == sorted(_favorites(supporting))
            assert len({c.mal_id for c in picked}) == NUM_CHARACTERS

    def test_main_character_comes_last_even_when_less_popular(self):
        cast = make_cast(supporting_favorites=(100, 200, 300), main_favorites=(1,))
        picked = sample_characters(cast, rng=random.Random(0))
        assert picked[-1].role == CharacterRole.MAIN
        assert picked[-1].favorites == 1

    def test_empty_buckets_are_filled_from_remaining_supporting(self):
        # every favorite but one lands in the first bucket
        cast = make_cast(supporting_favorites=(0, 0, 0, 100), main_favorites=(500,))
        for seed in range(25):
            picked = sample_characters(cast, rng=random.Random(seed))
            assert len(picked) == NUM_CHARACTERS
            assert len({c.mal_id for c in picked[:-1]}) == NUM_CHARACTERS - 1

    def test_identical_favorites_still_fill_every_slot(self):
        cast = make_cast(supporting_favorites=(7, 7, 7), main_favorites=(7,))
        picked = sample_characters(cast, rng=random.Random(11))
        assert len(picked) == NUM_CHARACTERS
        assert [c.role for c in picked[:-1]] == [CharacterRole.SUPPORTING] * 3

    def test_fails_closed_without_main_characters(self):
        cast = make_cast(supporting_favorites=(1, 2, 3, 4, 5), main_favorites=())
        assert sample_characters(cast, rng=random.Random(5)) == []

    def test_other_roles_are_ignored(self):
        cast = make_cast(supporting_favorites=(10, 20, 30), main_favorites=())
        cast.append(make_character(90, CharacterRole.OTHER, 9999))
        assert sample_characters(cast, rng=random.Random(5)) == []

    def test_custom_target(self):
        cast = make_cast(supporting_favorites=tuple(range(0, 200, 10)), main_favorites=(5000,))
        picked = sample_characters(cast, target=6, rng=random.Random(2))
        assert len(picked) == 6
        assert picked[-1].role == CharacterRole.MAIN


class TestSampleCharactersSparse:
    def test_tops_up_with_distinct_main_characters(self):
        cast = make_cast(supporting_favorites=(5,), main_favorites=tuple(range(100, 2100, 100)))
        picked = sample_characters(cast, rng=random.Random(4))

        assert len(picked) == NUM_CHARACTERS
        assert len({c.mal_id for c in picked}) == NUM_CHARACTERS
        assert picked[0].role == CharacterRole.SUPPORTING
        assert _favorites(picked) == sorted(_favorites(picked))

    def test_all_supporting_characters_are_kept(self):
        cast = make_cast(supporting_favorites=(5, 6), main_favorites=tuple(range(100, 2100, 100)))
        picked = sample_characters(cast, rng=random.Random(8))
        supporting_ids = {c.mal_id for c in cast if c.role == CharacterRole.SUPPORTING}
        assert supporting_ids <= {c.mal_id for c in picked}

    def test_fails_closed_with_too_few_main_characters(self):
        cast = make_cast(supporting_favorites=(5,), main_favorites=(100, 200))
        cast.append(make_character(77, CharacterRole.OTHER, 3))
        assert sample_characters(cast, rng=random.Random(1)) == []

    def test_fails_closed_when_draws_keep_repeating(self):
        cast = make_cast(supporting_favorites=(), main_favorites=(100, 200, 300, 400))
        assert sample_characters(cast, rng=FirstChoiceRandom(0)) == []


class TestSampleCharactersCardinality:
    def test_result_is_target_or_empty(self):
        rng = random.Random(1234)
        for seed in range(60):
            supporting = tuple(rng.randint(0, 500) for _ in range(rng.randint(0, 8)))
            main = tuple(rng.randint(0, 5000) for _ in range(rng.randint(0, 4)))
            cast = make_cast(supporting_favorites=supporting, main_favorites=main)
            picked = sample_characters(cast, rng=random.Random(seed))
            assert len(picked) in {0, NUM_CHARACTERS}
            assert len({c.mal_id for c in picked}) == len(picked)
