"""
Pydantic models for CharaAnime data structures.

Contains the catalog and character records supplied by the providers, the
round history kept by a session, and the client-facing views that cross
component boundaries.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from charaanime.logic.enums import CharacterRole, GameMode, GameStatus

QUESTIONMARK_MARKER = "questionmark"  # placeholder artwork served for characters without a picture


class Studio(BaseModel):
    """An animation studio credited on an anime."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    is_animation_studio: bool = True


class AnimeEntry(BaseModel):
    """A single anime from the user's catalog."""

    model_config = ConfigDict(frozen=True)

    id: int
    id_mal: int | None = None
    name: str
    english_name: str | None = None
    alt_names: tuple[str, ...] = ()
    image: str = ""
    image_large: str | None = None
    genres: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    episodes: int | None = None
    season_year: int | None = None
    season: str | None = None
    format: str | None = None
    description: str | None = None
    studios: tuple[Studio, ...] = ()
    related_ids: tuple[int, ...] = ()


class CharacterRecord(BaseModel):
    """A character of one anime, as returned by the character provider."""

    model_config = ConfigDict(frozen=True)

    mal_id: int
    name: str = ""
    role: CharacterRole = CharacterRole.OTHER
    favorites: int = 0
    image_url: str = ""
    webp_image_url: str = ""

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, v: object) -> CharacterRole:
        if isinstance(v, CharacterRole):
            return v
        try:
            return CharacterRole(v)
        except ValueError:
            return CharacterRole.OTHER

    @property
    def has_placeholder_image(self) -> bool:
        return QUESTIONMARK_MARKER in self.image_url or QUESTIONMARK_MARKER in self.webp_image_url


class CatalogResult(BaseModel):
    """Catalog data for one user.

    ``pool`` holds the entries of the requested lists (e.g. "Completed");
    ``catalog`` holds every entry across all of the user's lists and is used
    to resolve guesses and related anime.
    """

    model_config = ConfigDict(frozen=True)

    user: str
    pool: tuple[AnimeEntry, ...] = ()
    catalog: tuple[AnimeEntry, ...] = ()


class RoundRecord(BaseModel):
    """Outcome of a concluded round. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    animes: tuple[AnimeEntry, ...]
    characters: tuple[CharacterRecord, ...]
    points: int = Field(ge=0)
    selected_animes: tuple[AnimeEntry, ...] = ()


class GameSummary(BaseModel):
    """End-of-session totals."""

    total_points: int
    max_points: int
    total_tries: int
    total_rounds: int
    rounds_played: int
    num_corrects: int
    is_perfect: bool


class CatalogItemView(BaseModel):
    """Searchable subset of an anime entry, used by clients to build guesses."""

    id: int
    name: str
    english_name: str | None = None
    alt_names: list[str]
    image: str


class GameView(BaseModel):
    """Visible session state for a client.

    Characters are revealed one card at a time up to ``current_position``;
    the answer anime is only included once the round has concluded.
    """

    status: GameStatus
    mode: GameMode
    total_rounds: int
    current_round: int
    current_position: int
    total_points: int
    num_corrects: int
    num_characters: int
    rounds_played: int
    characters: list[CharacterRecord]
    selected_animes: list[AnimeEntry]
    answer: AnimeEntry | None = None
    is_new_record_endless: bool = False
