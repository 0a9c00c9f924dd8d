"""Typed domain exceptions for CharaAnime.

Recoverable game conditions (a short character sample, an exhausted anime
pool, a guess during the reveal) are expressed through return values and
status transitions, not exceptions. The classes below cover the conditions
a caller must act on, and are converted to JSON error responses at the
server boundary.
"""


class CharaAnimeError(Exception):
    """Base exception for CharaAnime domain errors."""


class RoundSetupError(CharaAnimeError):
    """No sample-able anime was found within the configured number of attempts.

    Attributes:
        attempts: How many anime were tried before giving up.

    """

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"no anime with enough usable characters after {attempts} attempts")


class ProviderError(CharaAnimeError):
    """An upstream catalog or character provider failed or returned malformed data."""


class UnknownAnimeError(CharaAnimeError):
    """A guess referenced an anime id that is not in the session catalog."""

    def __init__(self, anime_id: int) -> None:
        self.anime_id = anime_id
        super().__init__(f"anime {anime_id} is not in the catalog")


class SessionNotFoundError(CharaAnimeError):
    """No game session exists with the given id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"session {session_id!r} not found")


class InvalidTransitionError(CharaAnimeError):
    """An operation was requested in a status that does not allow it."""

    def __init__(self, operation: str, status: str) -> None:
        self.operation = operation
        self.status = status
        super().__init__(f"cannot {operation} while the game is {status}")


class ServerAtCapacityError(CharaAnimeError):
    """No session slot is free."""

    def __init__(self, max_capacity: int) -> None:
        self.max_capacity = max_capacity
        super().__init__(f"server at capacity ({max_capacity} sessions)")
