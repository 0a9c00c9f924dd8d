"""
Session state for a CharaAnime game.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from charaanime.logic.enums import GameMode, GameStatus
from charaanime.logic.sampler import NUM_CHARACTERS
from charaanime.logic.types import AnimeEntry, CharacterRecord, RoundRecord


@dataclass
class GameState:
    """
    Mutable state of one game session.

    Owned by a single CharaAnimeGame and only changed through its transition
    methods.
    """

    # configuration
    mode: GameMode = GameMode.CLASSIC
    total_rounds: int = 0
    num_characters: int = NUM_CHARACTERS

    # progression
    current_round: int = 0  # 1-based once the game has started
    current_position: int = 0  # characters revealed in the current round
    total_points: int = 0
    num_corrects: int = 0
    animes_already_showed: list[int] = field(default_factory=list)  # AniList ids, unique
    rounds: list[RoundRecord] = field(default_factory=list)

    # current round
    anime: AnimeEntry | None = None
    answers: tuple[AnimeEntry, ...] = ()  # valid-answer pool
    characters: tuple[CharacterRecord, ...] = ()
    selected_animes: list[AnimeEntry] = field(default_factory=list)  # most recent guess first

    status: GameStatus = GameStatus.INIT
    is_new_record_endless: bool = False

    def reset_round(self) -> None:
        """Clear round-local progress before a new round is set up."""
        self.current_position = 0
        self.selected_animes = []
        self.status = GameStatus.STALE

    def clear_round_data(self) -> None:
        self.anime = None
        self.answers = ()
        self.characters = ()

    def record_round(self, points: int) -> RoundRecord:
        record = RoundRecord(
            animes=self.answers,
            characters=self.characters,
            points=points,
            selected_animes=tuple(self.selected_animes),
        )
        self.rounds.append(record)
        return record

    def mark_showed(self, anime_id: int) -> None:
        if anime_id not in self.animes_already_showed:
            self.animes_already_showed.append(anime_id)
