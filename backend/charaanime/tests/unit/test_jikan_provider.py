from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from charaanime.logic.enums import CharacterRole
from charaanime.logic.exceptions import ProviderError
from charaanime.providers.jikan import JikanCharacterProvider, format_character


def _item(mal_id, role="Supporting", favorites=10):
    return {
        "character": {
            "mal_id": mal_id,
            "name": f"Character {mal_id}",
            "images": {
                "jpg": {"image_url": f"https://cdn.test/{mal_id}.jpg"},
                "webp": {"image_url": f"https://cdn.test/{mal_id}.webp"},
            },
        },
        "role": role,
        "favorites": favorites,
    }


def _response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    return response


class TestFormatCharacter:
    def test_maps_fields(self):
        record = format_character(_item(7, "Main", 1200))
        assert record.mal_id == 7
        assert record.role == CharacterRole.MAIN
        assert record.favorites == 1200
        assert record.image_url == "https://cdn.test/7.jpg"
        assert record.webp_image_url == "https://cdn.test/7.webp"

    def test_missing_images_and_favorites(self):
        record = format_character({"character": {"mal_id": 1, "name": "X"}, "role": "Supporting"})
        assert record.image_url == ""
        assert record.favorites == 0


class TestJikanCharacterProvider:
    @pytest.fixture
    def mock_client(self):
        with patch("httpx.AsyncClient") as mock_client_cls:
            mock_instance = AsyncMock()
            mock_client_cls.return_value.__aenter__.return_value = mock_instance
            yield mock_instance

    async def test_fetches_characters(self, mock_client):
        mock_client.get.return_value = _response(body={"data": [_item(1), _item(2, "Main")]})

        records = await JikanCharacterProvider("http://jikan.test/v4/").get_characters(5114)

        assert [r.mal_id for r in records] == [1, 2]
        mock_client.get.assert_awaited_once_with("http://jikan.test/v4/anime/5114/characters")

    async def test_not_found_returns_empty(self, mock_client):
        mock_client.get.return_value = _response(404)
        assert await JikanCharacterProvider().get_characters(1) == []

    async def test_rate_limited(self, mock_client):
        mock_client.get.return_value = _response(429)
        with pytest.raises(ProviderError, match="status 429"):
            await JikanCharacterProvider().get_characters(1)

    async def test_connection_error(self, mock_client):
        mock_client.get.side_effect = httpx.RequestError("Connection refused")
        with pytest.raises(ProviderError, match="Failed to connect"):
            await JikanCharacterProvider().get_characters(1)

    async def test_malformed_payload(self, mock_client):
        mock_client.get.return_value = _response(body={"data": [{"role": "Main"}]})
        with pytest.raises(ProviderError, match="Malformed"):
            await JikanCharacterProvider().get_characters(1)

    async def test_null_data(self, mock_client):
        mock_client.get.return_value = _response(body={"data": None})
        assert await JikanCharacterProvider().get_characters(1) == []
