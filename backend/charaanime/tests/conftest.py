import random

import pytest

from charaanime.logic.enums import GameMode
from charaanime.logic.game import CharaAnimeGame
from charaanime.session.manager import SessionManager
from charaanime.tests.helpers import make_cast, make_catalog
from charaanime.tests.mocks import FakeCatalogProvider, FakeCharacterProvider


@pytest.fixture
def character_provider():
    return FakeCharacterProvider(default=make_cast())


@pytest.fixture
def catalog():
    return make_catalog(5)


@pytest.fixture
def catalog_provider(catalog):
    return FakeCatalogProvider({catalog.user: catalog})


@pytest.fixture
def make_game(catalog, character_provider):
    """Factory for games over the default five-anime catalog."""

    def _make(
        mode: GameMode = GameMode.CLASSIC,
        total_rounds: int = 3,
        **kwargs,
    ) -> CharaAnimeGame:
        kwargs.setdefault("rng", random.Random(7))
        return CharaAnimeGame(
            kwargs.pop("catalog", catalog),
            kwargs.pop("character_provider", character_provider),
            mode=mode,
            total_rounds=total_rounds,
            **kwargs,
        )

    return _make


@pytest.fixture
def session_manager(catalog_provider, character_provider):
    return SessionManager(catalog_provider, character_provider)
