from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from charaanime.logic.game import CharaAnimeGame


@dataclass
class GameSession:
    """A player's game, addressable by session id.

    Every mutation of ``game`` happens while holding ``lock``.
    """

    session_id: str
    user: str
    game: CharaAnimeGame
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_activity: float = field(default_factory=time.monotonic)  # monotonic seconds
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    def idle_seconds(self, now: float | None = None) -> float:
        if now is None:
            now = time.monotonic()
        return now - self.last_activity
