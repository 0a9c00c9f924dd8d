from __future__ import annotations

import json
from typing import TYPE_CHECKING, TypeVar

import structlog
from pydantic import BaseModel, ValidationError
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from charaanime.logic.exceptions import (
    InvalidTransitionError,
    ProviderError,
    RoundSetupError,
    ServerAtCapacityError,
    SessionNotFoundError,
    UnknownAnimeError,
)
from charaanime.providers.anilist import AniListCatalogProvider
from charaanime.providers.jikan import JikanCharacterProvider
from charaanime.server.settings import CharaAnimeSettings
from charaanime.server.types import ConfigureRequest, CreateSessionRequest, GuessRequest, WinRequest
from charaanime.session.manager import SessionManager
from shared.logging import setup_logging

if TYPE_CHECKING:
    from starlette.requests import Request

logger = structlog.get_logger()

_MAX_REQUEST_BODY_SIZE = 4096


class InvalidRequestBodyError(Exception):
    pass


T = TypeVar("T", bound=BaseModel)


async def _parse_body(request: Request, model: type[T]) -> T:
    try:
        raw_body = await request.body()
        if len(raw_body) > _MAX_REQUEST_BODY_SIZE:
            raise InvalidRequestBodyError("Request body too large")
        body = json.loads(raw_body) if raw_body else {}
        if not isinstance(body, dict):
            raise InvalidRequestBodyError("Invalid request body")
        return model(**body)
    except (ValueError, TypeError, UnicodeDecodeError, ValidationError) as e:  # fmt: skip
        raise InvalidRequestBodyError("Invalid request body") from e


def _manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def _session_id(request: Request) -> str:
    return request.path_params["session_id"]


def _dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json")


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def create_session(request: Request) -> JSONResponse:
    settings: CharaAnimeSettings = request.app.state.settings
    body = await _parse_body(request, CreateSessionRequest)

    total_rounds = body.total_rounds if body.total_rounds is not None else settings.default_total_rounds
    session = await _manager(request).create_session(
        body.user,
        mode=body.mode,
        total_rounds=total_rounds,
        seed=body.seed,
    )
    return JSONResponse(
        {"session_id": session.session_id, "game": _dump(session.game.view())},
        status_code=201,
    )


async def get_session(request: Request) -> JSONResponse:
    view = await _manager(request).view(_session_id(request))
    return JSONResponse(_dump(view))


async def delete_session(request: Request) -> Response:
    session_id = _session_id(request)
    if not _manager(request).remove_session(session_id):
        raise SessionNotFoundError(session_id)
    return Response(status_code=204)


async def get_catalog(request: Request) -> JSONResponse:
    items = await _manager(request).catalog(_session_id(request))
    return JSONResponse({"animes": [_dump(item) for item in items]})


async def configure(request: Request) -> JSONResponse:
    body = await _parse_body(request, ConfigureRequest)
    view = await _manager(request).configure(_session_id(request), body.mode, body.total_rounds)
    return JSONResponse(_dump(view))


async def start_game(request: Request) -> JSONResponse:
    view = await _manager(request).start_game(_session_id(request))
    return JSONResponse(_dump(view))


async def guess(request: Request) -> JSONResponse:
    body = await _parse_body(request, GuessRequest)
    correct, view = await _manager(request).guess(_session_id(request), body.anime_id)
    return JSONResponse({"correct": correct, "game": _dump(view)})


async def reveal(request: Request) -> JSONResponse:
    revealed, view = await _manager(request).reveal_next(_session_id(request))
    return JSONResponse({"revealed": revealed, "game": _dump(view)})


async def next_round(request: Request) -> JSONResponse:
    view = await _manager(request).next_round(_session_id(request))
    return JSONResponse(_dump(view))


async def redo(request: Request) -> JSONResponse:
    view = await _manager(request).redo(_session_id(request))
    return JSONResponse(_dump(view))


async def reset(request: Request) -> JSONResponse:
    view = await _manager(request).init_game(_session_id(request))
    return JSONResponse(_dump(view))


async def win(request: Request) -> JSONResponse:
    body = await _parse_body(request, WinRequest)
    view = await _manager(request).win_game(_session_id(request), is_new_record=body.is_new_record)
    return JSONResponse(_dump(view))


async def summary(request: Request) -> JSONResponse:
    result = await _manager(request).summary(_session_id(request))
    return JSONResponse(_dump(result))


async def _invalid_body(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=400)


async def _session_not_found(_request: Request, _exc: Exception) -> JSONResponse:
    return JSONResponse({"error": "Session not found"}, status_code=404)


async def _unknown_anime(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=400)


async def _invalid_transition(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=409)


async def _server_at_capacity(_request: Request, _exc: Exception) -> JSONResponse:
    return JSONResponse({"error": "Server at capacity"}, status_code=503)


async def _provider_error(_request: Request, exc: Exception) -> JSONResponse:
    logger.warning("upstream provider failed", error=str(exc))
    return JSONResponse({"error": "Upstream service unavailable"}, status_code=502)


async def _round_setup_error(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=503)


def create_app(
    settings: CharaAnimeSettings | None = None,
    session_manager: SessionManager | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = CharaAnimeSettings()

    if session_manager is None:
        session_manager = SessionManager(
            AniListCatalogProvider(settings.anilist_url, timeout=settings.http_timeout_seconds),
            JikanCharacterProvider(settings.jikan_url, timeout=settings.http_timeout_seconds),
            list_names=settings.list_names,
            tags_limit=settings.tags_limit,
            max_setup_attempts=settings.max_setup_attempts,
            max_capacity=settings.max_capacity,
            idle_timeout_seconds=settings.session_idle_timeout_seconds,
        )

    routes = [
        Route("/health", health, methods=["GET"]),
        Route("/sessions", create_session, methods=["POST"]),
        Route("/sessions/{session_id}", get_session, methods=["GET"]),
        Route("/sessions/{session_id}", delete_session, methods=["DELETE"]),
        Route("/sessions/{session_id}/catalog", get_catalog, methods=["GET"]),
        Route("/sessions/{session_id}/configure", configure, methods=["POST"]),
        Route("/sessions/{session_id}/start", start_game, methods=["POST"]),
        Route("/sessions/{session_id}/guess", guess, methods=["POST"]),
        Route("/sessions/{session_id}/reveal", reveal, methods=["POST"]),
        Route("/sessions/{session_id}/next", next_round, methods=["POST"]),
        Route("/sessions/{session_id}/redo", redo, methods=["POST"]),
        Route("/sessions/{session_id}/reset", reset, methods=["POST"]),
        Route("/sessions/{session_id}/win", win, methods=["POST"]),
        Route("/sessions/{session_id}/summary", summary, methods=["GET"]),
    ]

    exception_handlers = {
        InvalidRequestBodyError: _invalid_body,
        SessionNotFoundError: _session_not_found,
        UnknownAnimeError: _unknown_anime,
        InvalidTransitionError: _invalid_transition,
        ServerAtCapacityError: _server_at_capacity,
        ProviderError: _provider_error,
        RoundSetupError: _round_setup_error,
    }

    app = Starlette(routes=routes, exception_handlers=exception_handlers)
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )
    app.state.settings = settings
    app.state.session_manager = session_manager

    logger.info("charaanime server ready")
    return app


def get_app() -> Starlette:  # pragma: no cover
    """ASGI application factory for production use (e.g., uvicorn --factory)."""
    settings = CharaAnimeSettings()
    setup_logging(settings.log_dir)
    return create_app(settings=settings)
