"""
String enum definitions for CharaAnime game concepts.
"""

from enum import StrEnum


class GameStatus(StrEnum):
    """Lifecycle status of a game session."""

    INIT = "init"
    LOADING = "loading"
    STALE = "stale"
    PLAYING = "playing"
    WIN_ROUND = "win-round"
    ERROR_ROUND = "error-round"
    SHOW_NAMES = "show-names"
    WIN = "win"
    END = "end"


class GameMode(StrEnum):
    """Rule set for a session."""

    CLASSIC = "classic"
    HARDCORE = "hardcore"
    ENDLESS = "endless"


class CharacterRole(StrEnum):
    """Role of a character within an anime, as reported by the character provider."""

    MAIN = "Main"
    SUPPORTING = "Supporting"
    OTHER = "other"


# statuses in which a guess can be evaluated
GUESSABLE_STATUSES: frozenset[GameStatus] = frozenset({GameStatus.PLAYING, GameStatus.ERROR_ROUND})

# statuses that conclude the current round
ROUND_CONCLUDED_STATUSES: frozenset[GameStatus] = frozenset(
    {GameStatus.WIN_ROUND, GameStatus.SHOW_NAMES, GameStatus.END, GameStatus.WIN},
)

# statuses in which no round is running and a new game can be started
IDLE_STATUSES: frozenset[GameStatus] = frozenset({GameStatus.INIT, GameStatus.END, GameStatus.WIN})

# statuses from which the session moves on to the next round
ADVANCEABLE_STATUSES: frozenset[GameStatus] = frozenset(
    {GameStatus.PLAYING, GameStatus.ERROR_ROUND, GameStatus.WIN_ROUND, GameStatus.SHOW_NAMES},
)

# statuses in which the current round has no record yet and can be set up again
REDOABLE_STATUSES: frozenset[GameStatus] = frozenset({GameStatus.STALE, GameStatus.LOADING, GameStatus.PLAYING})
