from __future__ import annotations

import contextlib
import uuid
from typing import TYPE_CHECKING

import structlog

from charaanime.logic.enums import GameMode, GameStatus
from charaanime.logic.exceptions import ServerAtCapacityError, SessionNotFoundError
from charaanime.logic.game import DEFAULT_TOTAL_ROUNDS, CharaAnimeGame
from charaanime.logic.rng import create_game_rng
from charaanime.logic.round_setup import DEFAULT_MAX_SETUP_ATTEMPTS
from charaanime.logic.service import DEFAULT_LIST_NAMES
from charaanime.session.models import GameSession

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from charaanime.logic.service import CatalogProvider, CharacterProvider
    from charaanime.logic.types import CatalogItemView, GameSummary, GameView

logger = structlog.get_logger()

DEFAULT_IDLE_TIMEOUT_SECONDS = 1800.0

# sessions that may be dropped to free a slot for a new player
_FINISHED_STATUSES = frozenset({GameStatus.END, GameStatus.WIN})


class SessionManager:
    """Own every active game session and serialize the operations on each one."""

    def __init__(
        self,
        catalog_provider: CatalogProvider,
        character_provider: CharacterProvider,
        *,
        list_names: Sequence[str] = DEFAULT_LIST_NAMES,
        tags_limit: int | None = None,
        max_setup_attempts: int = DEFAULT_MAX_SETUP_ATTEMPTS,
        max_capacity: int | None = None,
        idle_timeout_seconds: float = DEFAULT_IDLE_TIMEOUT_SECONDS,
    ) -> None:
        self._catalog_provider = catalog_provider
        self._character_provider = character_provider
        self._list_names = tuple(list_names)
        self._tags_limit = tags_limit
        self._max_setup_attempts = max_setup_attempts
        self._max_capacity = max_capacity
        self._idle_timeout_seconds = idle_timeout_seconds
        self._pending_creates = 0  # sessions whose catalog is still loading
        self._sessions: dict[str, GameSession] = {}  # session_id -> GameSession

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def get_session(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    async def create_session(
        self,
        user: str,
        *,
        mode: GameMode = GameMode.CLASSIC,
        total_rounds: int = DEFAULT_TOTAL_ROUNDS,
        seed: int | None = None,
    ) -> GameSession:
        """Load the user's catalog and register a new game in the init status.

        The slot is reserved before the catalog is loaded, so concurrent
        creates never exceed ``max_capacity``.
        Raises ServerAtCapacityError when no slot can be freed and
        ProviderError when the catalog cannot be loaded.
        """
        self._reserve_slot()
        self._pending_creates += 1
        try:
            catalog = await self._catalog_provider.get_user_anime_list(
                user,
                self._list_names,
                tags_limit=self._tags_limit,
            )
        finally:
            self._pending_creates -= 1

        game = CharaAnimeGame(
            catalog,
            self._character_provider,
            mode=mode,
            total_rounds=total_rounds,
            max_setup_attempts=self._max_setup_attempts,
            rng=create_game_rng(seed),
        )
        session_id = str(uuid.uuid4())
        session = GameSession(session_id=session_id, user=user, game=game)
        self._sessions[session_id] = session
        logger.info("session created", session_id=session_id, user=user, mode=mode, pool=game.pool_size)
        return session

    def _occupied_slots(self) -> int:
        return len(self._sessions) + self._pending_creates

    def _reserve_slot(self) -> None:
        self.evict_idle_sessions()
        if self._max_capacity is None:
            return
        if self._occupied_slots() >= self._max_capacity:
            self._evict_finished_session()
        if self._occupied_slots() >= self._max_capacity:
            raise ServerAtCapacityError(self._max_capacity)

    def evict_idle_sessions(self, now: float | None = None) -> int:
        """Remove sessions without activity for longer than the idle timeout.

        Sessions with an operation in progress are kept. Returns the number removed.
        """
        idle = [
            session_id
            for session_id, session in self._sessions.items()
            if not session.lock.locked() and session.idle_seconds(now) > self._idle_timeout_seconds
        ]
        for session_id in idle:
            self.remove_session(session_id)
        if idle:
            logger.info("idle sessions evicted", count=len(idle))
        return len(idle)

    def _evict_finished_session(self) -> bool:
        finished = [
            session
            for session in self._sessions.values()
            if session.game.state.status in _FINISHED_STATUSES and not session.lock.locked()
        ]
        if not finished:
            return False
        oldest = min(finished, key=lambda s: s.last_activity)
        logger.info("finished session evicted", session_id=oldest.session_id)
        return self.remove_session(oldest.session_id)

    def remove_session(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.game.init_game()
        logger.info("session removed", session_id=session_id)
        return True

    @contextlib.asynccontextmanager
    async def _locked(self, session_id: str) -> AsyncIterator[GameSession]:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        with structlog.contextvars.bound_contextvars(session_id=session_id):
            async with session.lock:
                session.touch()
                yield session

    async def view(self, session_id: str) -> GameView:
        async with self._locked(session_id) as session:
            return session.game.view()

    async def summary(self, session_id: str) -> GameSummary:
        async with self._locked(session_id) as session:
            return session.game.summary()

    async def configure(self, session_id: str, mode: GameMode, total_rounds: int) -> GameView:
        async with self._locked(session_id) as session:
            session.game.configure(mode, total_rounds)
            return session.game.view()

    async def start_game(self, session_id: str) -> GameView:
        async with self._locked(session_id) as session:
            await session.game.start_game()
            return session.game.view()

    async def guess(self, session_id: str, anime_id: int) -> tuple[bool, GameView]:
        """Submit a guess by AniList id. Raises UnknownAnimeError for ids outside the catalog."""
        async with self._locked(session_id) as session:
            candidate = session.game.find_anime(anime_id)
            correct = session.game.add_anime(candidate)
            return correct, session.game.view()

    async def reveal_next(self, session_id: str) -> tuple[bool, GameView]:
        async with self._locked(session_id) as session:
            revealed = session.game.reveal_next()
            return revealed, session.game.view()

    async def next_round(self, session_id: str) -> GameView:
        async with self._locked(session_id) as session:
            await session.game.next_round()
            return session.game.view()

    async def redo(self, session_id: str) -> GameView:
        async with self._locked(session_id) as session:
            await session.game.redo()
            return session.game.view()

    async def init_game(self, session_id: str) -> GameView:
        async with self._locked(session_id) as session:
            session.game.init_game()
            return session.game.view()

    async def win_game(self, session_id: str, *, is_new_record: bool = False) -> GameView:
        async with self._locked(session_id) as session:
            session.game.set_new_record_endless(is_new_record)
            session.game.win_game()
            return session.game.view()

    async def catalog(self, session_id: str) -> list[CatalogItemView]:
        async with self._locked(session_id) as session:
            return session.game.catalog_items()
