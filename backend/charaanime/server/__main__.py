"""Run the CharaAnime server: ``python -m charaanime.server``."""

import uvicorn

from charaanime.server.settings import CharaAnimeSettings

if __name__ == "__main__":  # pragma: no cover
    settings = CharaAnimeSettings()
    uvicorn.run(
        "charaanime.server.app:get_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )
