import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import uvicorn
from fastapi import APIRouter, Body, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI

from api.settings import Settings
from db.genre_cache import GenreListCache
from db.review_store import ReviewStore
from db.tmdb import (
    DEFAULT_LANGUAGE,
    DEFAULT_REGION,
    DEFAULT_SORT_BY,
    HINDI_LANGUAGE_CODE,
    create_tmdb_client,
    discover_movies,
    fetch_genres,
    fetch_trending,
    search_movies,
)
from implementation.classes.errors import (
    ArtifactValidationError,
    ConfigurationError,
    GatewayError,
    InputError,
)
from implementation.classes.schemas import GenerationSubject
from implementation.llms.artifact_generation import generate_review, generate_script
from implementation.llms.generic_methods import create_openai_client
from implementation.validation import format_issues

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Attach a root handler at `level` unless the host (e.g. pytest) already installed one."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create the shared upstream clients on startup and close them on shutdown.

    Clients already placed on app.state (e.g. by tests) are left alone. A
    missing credential leaves the client unset; endpoints that need it then
    fail with ConfigurationError instead of the whole service refusing to start.
    """
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    created: list[Any] = []

    if app.state.tmdb_client is None and (settings.tmdb_access_token or settings.tmdb_api_key):
        app.state.tmdb_client = create_tmdb_client(settings.tmdb_access_token, settings.tmdb_api_key)
        created.append(app.state.tmdb_client)
    if app.state.llm_client is None and settings.openai_api_key:
        app.state.llm_client = create_openai_client(settings.openai_api_key)
        created.append(app.state.llm_client)

    logger.info("API starting; allowed origin: %s", settings.allowed_origin)
    yield

    for client in created:
        if isinstance(client, AsyncOpenAI):
            await client.close()
        else:
            await client.aclose()


# ===============================
#        Request helpers
# ===============================

def _tmdb_client(request: Request) -> httpx.AsyncClient:
    client = request.app.state.tmdb_client
    if client is None:
        raise ConfigurationError("TMDB_ACCESS_TOKEN or TMDB_KEY missing")
    return client


def _llm_client(request: Request) -> AsyncOpenAI:
    client = request.app.state.llm_client
    if client is None:
        raise ConfigurationError("OPENAI_API_KEY missing")
    return client


def _parse_year(raw: Any) -> Optional[int]:
    """
    Accept a non-negative int or a string of ASCII digits; blank means no year.

    The same rule applies to both forms, so -5 and "-5" are rejected alike.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        text = raw.strip()
        if text.isascii() and text.isdigit():
            return int(text)
    elif isinstance(raw, float) and raw.is_integer() and raw >= 0:
        return int(raw)
    elif isinstance(raw, int) and not isinstance(raw, bool) and raw >= 0:
        return raw
    raise InputError("year must be an integer")


def parse_generation_request(payload: Any) -> tuple[GenerationSubject, Optional[dict[str, Any]]]:
    """
    Validate a script/review request body into a subject and optional style.

    Raises:
        InputError: title missing or not a non-blank string, or year not an integer.
    """
    if not isinstance(payload, dict):
        payload = {}

    title = payload.get("title")
    if not isinstance(title, str) or not title.strip():
        raise InputError("title required")

    overview = payload.get("overview")
    style = payload.get("style")
    subject = GenerationSubject(
        title=title,
        year=_parse_year(payload.get("year")),
        overview=overview if isinstance(overview, str) else None,
    )
    return subject, style if isinstance(style, dict) else None


def _error_response(status_code: int, error: str, details: Optional[list] = None) -> JSONResponse:
    content: dict[str, Any] = {"ok": False, "error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


# ===============================
#        Exception handlers
# ===============================

async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    endpoint = request.url.path
    if isinstance(exc, ArtifactValidationError):
        logger.warning("%s: %s %s", endpoint, exc.message, exc.issues)
        return _error_response(exc.status_code, "bad_request", details=exc.issues)
    if exc.status_code < 500:
        logger.warning("%s: %s", endpoint, exc.message)
    else:
        logger.error("%s failed: %s", endpoint, exc.message, exc_info=exc)
    return _error_response(exc.status_code, exc.message)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    issues = format_issues(exc.errors())
    logger.warning("%s: bad request %s", request.url.path, issues)
    return _error_response(400, "bad_request", details=issues)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s failed with unexpected error", request.url.path, exc_info=exc)
    return _error_response(500, str(exc) or "internal_error")


# ===============================
#             Routes
# ===============================

router = APIRouter(prefix="/api")


@router.get("/health")
async def health_check():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@router.get("/trending")
async def trending(
    request: Request,
    region: str = DEFAULT_REGION,
    page: int = 1,
    lang: str = DEFAULT_LANGUAGE,
):
    payload = await fetch_trending(_tmdb_client(request), region=region, page=page, lang=lang)
    return {"ok": True, **payload.model_dump()}


@router.get("/search")
async def search(
    request: Request,
    q: Optional[str] = None,
    page: int = 1,
    region: str = DEFAULT_REGION,
    lang: str = DEFAULT_LANGUAGE,
    include_adult: bool = Query(False, alias="includeAdult"),
    year: Optional[int] = None,
):
    if not q:
        raise InputError("q required")
    payload = await search_movies(
        _tmdb_client(request),
        query=q,
        page=page,
        region=region,
        lang=lang,
        include_adult=include_adult,
        year=year,
    )
    return {"ok": True, **payload.model_dump()}


@router.get("/genres")
async def genres(request: Request, lang: str = DEFAULT_LANGUAGE):
    client = _tmdb_client(request)
    cache: GenreListCache = request.app.state.genre_cache

    async def _fetch(language: str):
        return await fetch_genres(client, lang=language)

    items = await cache.get_or_fetch(lang, _fetch)
    return {"ok": True, "items": [item.model_dump() for item in items]}


@router.get("/movies/by-genre")
async def movies_by_genre(
    request: Request,
    genre_id: Optional[str] = Query(None, alias="genreId"),
    page: int = 1,
    region: str = DEFAULT_REGION,
    lang: str = DEFAULT_LANGUAGE,
    sort_by: str = Query(DEFAULT_SORT_BY, alias="sortBy"),
    year: Optional[int] = None,
    include_adult: bool = Query(False, alias="includeAdult"),
):
    if not genre_id:
        raise InputError("genreId required (e.g. 28 or 28,35)")
    payload = await discover_movies(
        _tmdb_client(request),
        genre_id=genre_id,
        page=page,
        region=region,
        lang=lang,
        sort_by=sort_by,
        year=year,
        include_adult=include_adult,
    )
    return {"ok": True, **payload.model_dump()}


@router.get("/movies/hindi")
async def hindi_movies(
    request: Request,
    page: int = 1,
    region: str = DEFAULT_REGION,
    sort_by: str = Query(DEFAULT_SORT_BY, alias="sortBy"),
    year: Optional[int] = None,
    include_adult: bool = Query(False, alias="includeAdult"),
):
    payload = await discover_movies(
        _tmdb_client(request),
        original_language=HINDI_LANGUAGE_CODE,
        page=page,
        region=region,
        lang=None,
        sort_by=sort_by,
        year=year,
        include_adult=include_adult,
    )
    return {"ok": True, **payload.model_dump()}


@router.get("/movies/hindi/by-genre")
async def hindi_movies_by_genre(
    request: Request,
    genre_id: Optional[str] = Query(None, alias="genreId"),
    page: int = 1,
    region: str = DEFAULT_REGION,
    sort_by: str = Query(DEFAULT_SORT_BY, alias="sortBy"),
    year: Optional[int] = None,
    include_adult: bool = Query(False, alias="includeAdult"),
):
    if not genre_id:
        raise InputError("genreId required")
    payload = await discover_movies(
        _tmdb_client(request),
        genre_id=genre_id,
        original_language=HINDI_LANGUAGE_CODE,
        page=page,
        region=region,
        lang=None,
        sort_by=sort_by,
        year=year,
        include_adult=include_adult,
    )
    return {"ok": True, **payload.model_dump()}


@router.post("/scripts")
async def create_script(request: Request, payload: Any = Body(None)):
    subject, style = parse_generation_request(payload)
    settings: Settings = request.app.state.settings
    script = await generate_script(
        subject,
        style,
        client=_llm_client(request),
        model=settings.openai_model,
        style_override=settings.style_override_json,
    )
    return {"ok": True, "script": script.model_dump(by_alias=True)}


@router.post("/review")
async def create_review(request: Request, payload: Any = Body(None)):
    subject, style = parse_generation_request(payload)
    settings: Settings = request.app.state.settings
    review = await generate_review(
        subject,
        style,
        client=_llm_client(request),
        model=settings.openai_model,
        style_override=settings.style_override_json,
    )
    return {"ok": True, "review": review.model_dump(by_alias=True)}


@router.post("/reviews")
async def add_user_review(request: Request, payload: Any = Body(None)):
    body = payload if isinstance(payload, dict) else {}
    movie_id, text = body.get("movieId"), body.get("text")
    if not movie_id or not text or isinstance(movie_id, (dict, list)) or not isinstance(text, str):
        raise InputError("movieId & text required")

    rating = body.get("rating") or 0
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        raise InputError("rating must be a number")

    store: ReviewStore = request.app.state.review_store
    review = store.add(movie_id=movie_id, text=text, rating=rating)
    return {"ok": True, "review": review.model_dump(by_alias=True)}


@router.get("/reviews/{movie_id}")
async def list_user_reviews(request: Request, movie_id: str):
    store: ReviewStore = request.app.state.review_store
    items = store.list_for_movie(movie_id)
    return {"ok": True, "items": [review.model_dump(by_alias=True) for review in items]}


# ===============================
#          Application
# ===============================

def create_app(
    settings: Optional[Settings] = None,
    *,
    tmdb_client: Optional[httpx.AsyncClient] = None,
    llm_client: Optional[AsyncOpenAI] = None,
    genre_cache: Optional[GenreListCache] = None,
    review_store: Optional[ReviewStore] = None,
) -> FastAPI:
    """Build the FastAPI app. Collaborators not passed in are created with defaults."""
    settings = settings or Settings.from_env()

    app = FastAPI(title="Movie Shorts Gateway", lifespan=lifespan)
    app.state.settings = settings
    app.state.tmdb_client = tmdb_client
    app.state.llm_client = llm_client
    app.state.genre_cache = genre_cache if genre_cache is not None else GenreListCache()
    app.state.review_store = review_store if review_store is not None else ReviewStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.allowed_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
