"""
Round and session state machine for CharaAnime.

Status flow: init -> stale -> (loading) -> playing -> win-round | error-round |
show-names -> stale (next round) | end. ``win`` is reached only through
win_game() (endless high-score path).
Operations called from a status that does not allow them raise
InvalidTransitionError; next_round outside a round is a no-op.

Round setup is the only suspension point. Each game keeps at most one setup
task in flight: starting a new setup cancels the previous one, and a result is
applied only if its token is still the latest.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from charaanime.logic.enums import (
    ADVANCEABLE_STATUSES,
    GUESSABLE_STATUSES,
    IDLE_STATUSES,
    REDOABLE_STATUSES,
    ROUND_CONCLUDED_STATUSES,
    GameMode,
    GameStatus,
)
from charaanime.logic.exceptions import CharaAnimeError, InvalidTransitionError, UnknownAnimeError
from charaanime.logic.matching import is_correct_guess, valid_answers
from charaanime.logic.rng import create_game_rng
from charaanime.logic.round_setup import DEFAULT_MAX_SETUP_ATTEMPTS, eligible_pool, setup_round
from charaanime.logic.sampler import NUM_CHARACTERS
from charaanime.logic.scoring import round_points, summarize_rounds
from charaanime.logic.state import GameState
from charaanime.logic.types import AnimeEntry, CatalogItemView, GameView

if TYPE_CHECKING:
    import random
    from collections.abc import Collection

    from charaanime.logic.round_setup import RoundSetup
    from charaanime.logic.service import CharacterProvider
    from charaanime.logic.types import CatalogResult, GameSummary

logger = structlog.get_logger()

DEFAULT_TOTAL_ROUNDS = 10


class CharaAnimeGame:
    """One game session over a user's catalog."""

    def __init__(
        self,
        catalog: CatalogResult,
        character_provider: CharacterProvider,
        *,
        mode: GameMode = GameMode.CLASSIC,
        total_rounds: int = DEFAULT_TOTAL_ROUNDS,
        num_characters: int = NUM_CHARACTERS,
        max_setup_attempts: int = DEFAULT_MAX_SETUP_ATTEMPTS,
        rng: random.Random | None = None,
    ) -> None:
        self.user = catalog.user
        self._pool = eligible_pool(catalog.pool)
        self._catalog: dict[int, AnimeEntry] = {}
        for entry in (*catalog.catalog, *catalog.pool):
            self._catalog.setdefault(entry.id, entry)
        self._character_provider = character_provider
        self._max_setup_attempts = max_setup_attempts
        self._rng = rng if rng is not None else create_game_rng()
        self._setup_task: asyncio.Task[RoundSetup | None] | None = None
        self._setup_token = 0
        self._state = GameState(num_characters=num_characters)
        self.configure(mode, total_rounds)

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def pool_size(self) -> int:
        return len(self._pool)

    @property
    def is_setup_pending(self) -> bool:
        return self._setup_task is not None and not self._setup_task.done()

    # ------------------------------------------------------------------ configuration

    def configure(self, mode: GameMode, total_rounds: int) -> None:
        """Set the game mode and round count. Non-positive counts become 1.

        Only allowed in the init status; finished games are reset first.
        """
        if self._state.status != GameStatus.INIT:
            raise InvalidTransitionError("configure", self._state.status)
        self._state.mode = mode
        self._state.total_rounds = total_rounds if total_rounds > 0 else 1
        self._apply_round_limit()

    def _apply_round_limit(self) -> None:
        """Clamp the round count to the pool; endless mode plays the whole pool."""
        state = self._state
        if state.total_rounds > len(self._pool) or state.mode == GameMode.ENDLESS:
            state.total_rounds = len(self._pool)

    # ------------------------------------------------------------------ transitions

    async def start_game(self) -> None:
        """Start a fresh session. From end or win this discards the previous results."""
        if self._state.status not in IDLE_STATUSES:
            raise InvalidTransitionError("start", self._state.status)
        self._reset_progress()
        state = self._state
        state.current_round = 1
        state.reset_round()
        logger.info("game started", mode=state.mode, total_rounds=state.total_rounds, pool=len(self._pool))
        await self._run_setup(())

    def add_anime(self, candidate: AnimeEntry) -> bool:
        """Evaluate a guess. Return True when it names the round's anime.

        Guesses are rejected (False, no state change) while no round is in play,
        during the reveal, and after an endless round has been lost.
        """
        state = self._state
        if not self._accepts_guess():
            logger.debug("guess rejected", status=state.status)
            return False

        state.selected_animes = [candidate, *state.selected_animes]

        if is_correct_guess(candidate, state.answers):
            state.num_corrects += 1
            points = round_points(max(state.current_position, 1))
            state.total_points += points
            state.record_round(points)
            state.status = GameStatus.WIN_ROUND
            logger.info("correct guess", anime_id=candidate.id, points=points, position=state.current_position)
            return True

        if state.mode == GameMode.HARDCORE:
            if state.current_position >= state.num_characters:
                state.status = GameStatus.SHOW_NAMES
                logger.info("hardcore round lost", anime_id=candidate.id)
                return False
            state.current_position += 1
        elif state.mode == GameMode.ENDLESS:
            state.record_round(0)

        state.status = GameStatus.ERROR_ROUND
        logger.info("wrong guess", anime_id=candidate.id, position=state.current_position)
        return False

    def _accepts_guess(self) -> bool:
        state = self._state
        if state.status not in GUESSABLE_STATUSES or state.anime is None:
            return False
        return not (state.mode == GameMode.ENDLESS and state.status == GameStatus.ERROR_ROUND)

    def reveal_next(self) -> bool:
        """Flip the next character card. Return False when nothing is left to reveal."""
        state = self._state
        if not self._accepts_guess() or state.current_position >= state.num_characters:
            return False
        state.current_position += 1
        return True

    async def next_round(self) -> None:
        state = self._state
        if state.anime is None or state.status not in ADVANCEABLE_STATUSES:
            return

        state.mark_showed(state.anime.id)
        if not state.selected_animes and state.current_round > 0:
            state.record_round(0)

        if state.mode == GameMode.ENDLESS and state.status != GameStatus.WIN_ROUND:
            self._end_game()
            return
        if state.mode != GameMode.ENDLESS and state.total_rounds != 0 and state.current_round >= state.total_rounds:
            self._end_game()
            return

        state.current_round += 1
        state.reset_round()
        await self._run_setup(tuple(state.animes_already_showed))

    def win_game(self) -> None:
        self._state.status = GameStatus.WIN
        logger.info("game won", total_points=self._state.total_points)

    def set_new_record_endless(self, is_new_record: bool) -> None:  # noqa: FBT001
        self._state.is_new_record_endless = is_new_record

    def init_game(self) -> None:
        """Hard reset to the initial status, keeping mode and round configuration."""
        self._cancel_setup()
        self._reset_progress()
        self._state.status = GameStatus.INIT

    def _reset_progress(self) -> None:
        state = self._state
        state.is_new_record_endless = False
        state.rounds = []
        state.current_round = 0
        state.current_position = 0
        state.selected_animes = []
        state.total_points = 0
        state.animes_already_showed = []
        state.num_corrects = 0
        state.clear_round_data()

    async def redo(self, exclude_ids: Collection[int] | None = None) -> None:
        """Set up the current round again.

        Excludes the already-shown anime unless ``exclude_ids`` is given.
        Only allowed while the round is loading, stale or unanswered, so a
        round is never recorded twice.
        """
        state = self._state
        if state.status not in REDOABLE_STATUSES:
            raise InvalidTransitionError("redo", state.status)
        if exclude_ids is None:
            exclude_ids = tuple(state.animes_already_showed)
        state.reset_round()
        await self._run_setup(exclude_ids)

    def _end_game(self) -> None:
        self._state.status = GameStatus.END
        logger.info("game ended", total_points=self._state.total_points, rounds=len(self._state.rounds))

    # ------------------------------------------------------------------ round setup

    async def _run_setup(self, exclude_ids: Collection[int]) -> None:
        self._cancel_setup()
        self._setup_token += 1
        token = self._setup_token

        state = self._state
        state.clear_round_data()
        state.status = GameStatus.LOADING
        task = asyncio.create_task(
            setup_round(
                self._pool,
                exclude_ids,
                self._character_provider,
                self._rng,
                num_characters=state.num_characters,
                max_attempts=self._max_setup_attempts,
            ),
        )
        self._setup_task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if token != self._setup_token:
                return
            raise
        except CharaAnimeError:
            # provider failures and exhausted retries leave the round ready for a redo
            if token == self._setup_token:
                state.status = GameStatus.STALE
            raise

        if token != self._setup_token:
            return
        if result is None:
            self._end_game()
            return

        state.anime = result.anime
        state.answers = valid_answers(result.anime, self._catalog)
        state.characters = result.characters
        # the first, most obscure character is shown when the round opens
        state.current_position = 1
        state.status = GameStatus.PLAYING
        logger.info("round ready", round=state.current_round, anime_id=result.anime.id)

    def _cancel_setup(self) -> None:
        self._setup_token += 1
        if self._setup_task is not None and not self._setup_task.done():
            self._setup_task.cancel()
        self._setup_task = None

    # ------------------------------------------------------------------ queries

    def find_anime(self, anime_id: int) -> AnimeEntry:
        entry = self._catalog.get(anime_id)
        if entry is None:
            raise UnknownAnimeError(anime_id)
        return entry

    def catalog_items(self) -> list[CatalogItemView]:
        return [
            CatalogItemView(
                id=entry.id,
                name=entry.name,
                english_name=entry.english_name,
                alt_names=list(entry.alt_names),
                image=entry.image,
            )
            for entry in sorted(self._catalog.values(), key=lambda e: e.name)
        ]

    def is_round_concluded(self) -> bool:
        state = self._state
        if state.status in ROUND_CONCLUDED_STATUSES:
            return True
        return state.mode == GameMode.ENDLESS and state.status == GameStatus.ERROR_ROUND

    def summary(self) -> GameSummary:
        state = self._state
        return summarize_rounds(
            state.rounds,
            total_rounds=state.total_rounds,
            total_points=state.total_points,
            num_corrects=state.num_corrects,
        )

    def view(self) -> GameView:
        state = self._state
        concluded = self.is_round_concluded()
        characters = state.characters if concluded else state.characters[: state.current_position]
        return GameView(
            status=state.status,
            mode=state.mode,
            total_rounds=state.total_rounds,
            current_round=state.current_round,
            current_position=state.current_position,
            total_points=state.total_points,
            num_corrects=state.num_corrects,
            num_characters=state.num_characters,
            rounds_played=len(state.rounds),
            characters=list(characters),
            selected_animes=list(state.selected_animes),
            answer=state.anime if concluded else None,
            is_new_record_endless=state.is_new_record_endless,
        )
