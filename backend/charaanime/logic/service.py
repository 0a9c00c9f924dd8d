from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from charaanime.logic.types import CatalogResult, CharacterRecord

DEFAULT_LIST_NAMES: tuple[str, ...] = ("Completed",)


class CatalogProvider(ABC):
    """
    Abstract source of a user's anime catalog.
    """

    @abstractmethod
    async def get_user_anime_list(
        self,
        user: str,
        list_names: Sequence[str] = DEFAULT_LIST_NAMES,
        *,
        tags_limit: int | None = None,
    ) -> CatalogResult:
        """
        Load the anime on a user's lists.

        The result pool holds the entries of the lists named in ``list_names``;
        the result catalog holds every entry the user has listed.
        Raises ProviderError when the upstream service fails.
        """
        ...


class CharacterProvider(ABC):
    """
    Abstract source of the characters of one anime.
    """

    @abstractmethod
    async def get_characters(self, id_mal: int) -> list[CharacterRecord]:
        """
        Return the characters of the anime with MyAnimeList id ``id_mal``.

        May return an empty list. No retry contract: a short result is handled
        by re-selecting another anime during round setup.
        """
        ...
