import pytest
from pydantic import ValidationError

from charaanime.server.settings import CharaAnimeSettings


class TestCharaAnimeSettings:
    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("CHARAANIME_ANILIST_URL", "http://anilist.example")
        monkeypatch.setenv("CHARAANIME_TAGS_LIMIT", "5")
        settings = CharaAnimeSettings()
        assert settings.anilist_url == "http://anilist.example"
        assert settings.tags_limit == 5

    def test_list_names_csv(self, monkeypatch):
        monkeypatch.setenv("CHARAANIME_LIST_NAMES", "Completed, Watching")
        assert CharaAnimeSettings().list_names == ["Completed", "Watching"]

    def test_list_names_json_array(self, monkeypatch):
        monkeypatch.setenv("CHARAANIME_LIST_NAMES", '["Completed","Paused"]')
        assert CharaAnimeSettings().list_names == ["Completed", "Paused"]

    def test_list_names_default(self, monkeypatch):
        monkeypatch.delenv("CHARAANIME_LIST_NAMES", raising=False)
        assert CharaAnimeSettings().list_names == ["Completed"]

    def test_cors_origins_csv(self, monkeypatch):
        monkeypatch.setenv("CHARAANIME_CORS_ORIGINS", "http://a.com,http://b.com")
        assert CharaAnimeSettings().cors_origins == ["http://a.com", "http://b.com"]

    def test_cors_origins_invalid_raises(self, monkeypatch):
        monkeypatch.setenv("CHARAANIME_CORS_ORIGINS", "")
        with pytest.raises(ValidationError, match="cors_origins"):
            CharaAnimeSettings()

    def test_max_capacity_zero_rejected(self):
        with pytest.raises(ValidationError, match="max_capacity"):
            CharaAnimeSettings(max_capacity=0)

    def test_max_setup_attempts_zero_rejected(self):
        with pytest.raises(ValidationError, match="max_setup_attempts"):
            CharaAnimeSettings(max_setup_attempts=0)

    def test_http_timeout_must_be_positive(self):
        with pytest.raises(ValidationError, match="http_timeout_seconds"):
            CharaAnimeSettings(http_timeout_seconds=0)

    def test_negative_tags_limit_rejected(self):
        with pytest.raises(ValidationError, match="tags_limit"):
            CharaAnimeSettings(tags_limit=-1)

    def test_log_dir_empty_rejected(self):
        with pytest.raises(ValidationError, match="log_dir"):
            CharaAnimeSettings(log_dir="")

    def test_host_and_port_from_env(self, monkeypatch):
        monkeypatch.setenv("CHARAANIME_HOST", "0.0.0.0")
        monkeypatch.setenv("CHARAANIME_PORT", "9100")
        settings = CharaAnimeSettings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 9100

    def test_port_out_of_range_rejected(self):
        with pytest.raises(ValidationError, match="port"):
            CharaAnimeSettings(port=70000)

    def test_session_idle_timeout_must_be_positive(self):
        with pytest.raises(ValidationError, match="session_idle_timeout_seconds"):
            CharaAnimeSettings(session_idle_timeout_seconds=0)
