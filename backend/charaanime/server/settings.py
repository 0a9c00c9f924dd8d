"""CharaAnime server configuration via environment variables."""

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from charaanime.logic.game import DEFAULT_TOTAL_ROUNDS
from charaanime.logic.round_setup import DEFAULT_MAX_SETUP_ATTEMPTS
from charaanime.providers.anilist import ANILIST_URL
from charaanime.providers.jikan import JIKAN_URL
from charaanime.session.manager import DEFAULT_IDLE_TIMEOUT_SECONDS
from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class CharaAnimeSettings(BaseSettings):
    model_config = {"env_prefix": "CHARAANIME_"}

    host: str = Field(default="127.0.0.1", min_length=1)
    port: int = Field(default=8000, ge=1, le=65535)
    anilist_url: str = Field(default=ANILIST_URL, min_length=1)
    jikan_url: str = Field(default=JIKAN_URL, min_length=1)
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    max_capacity: int = Field(default=500, ge=1)  # concurrent game sessions
    session_idle_timeout_seconds: float = Field(default=DEFAULT_IDLE_TIMEOUT_SECONDS, gt=0)
    max_setup_attempts: int = Field(default=DEFAULT_MAX_SETUP_ATTEMPTS, ge=1)
    default_total_rounds: int = Field(default=DEFAULT_TOTAL_ROUNDS, ge=1)
    list_names: list[str] = ["Completed"]
    tags_limit: int | None = Field(default=None, ge=0)
    log_dir: str = Field(default="backend/logs", min_length=1)
    cors_origins: list[str] = ["http://localhost:3000"]

    @field_validator("cors_origins", "list_names", mode="before")
    @classmethod
    def validate_string_lists(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: "PydanticBaseSettingsSource",
        env_settings: "PydanticBaseSettingsSource",  # noqa: ARG003
        dotenv_settings: "PydanticBaseSettingsSource",
        file_secret_settings: "PydanticBaseSettingsSource",
    ) -> tuple["PydanticBaseSettingsSource", ...]:
        return init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings
