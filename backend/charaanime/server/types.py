from pydantic import BaseModel, ConfigDict, Field

from charaanime.logic.enums import GameMode


class CreateSessionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user: str = Field(min_length=1, max_length=50, pattern=r"^[A-Za-z0-9_-]+$")
    mode: GameMode = GameMode.CLASSIC
    total_rounds: int | None = Field(default=None, strict=True)
    seed: int | None = Field(default=None, ge=0)


class ConfigureRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: GameMode
    total_rounds: int = Field(strict=True)


class GuessRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    anime_id: int = Field(strict=True)


class WinRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_new_record: bool = False
