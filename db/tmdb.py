"""
TMDB API client for trending, search, genre and discover queries.

Uses one shared httpx.AsyncClient created at startup. Authenticates with a v4
Bearer token when TMDB_ACCESS_TOKEN is set, otherwise with the v3 `api_key`
query parameter (TMDB_KEY). Responses are reshaped into MoviePage/GenreEntry
models. Failures are raised as UpstreamError; nothing is retried.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from implementation.classes.errors import ConfigurationError, UpstreamError
from implementation.classes.schemas import GenreEntry, MoviePage, MovieSummary

logger = logging.getLogger(__name__)

TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"
_TIMEOUT_SECONDS = 10.0

DEFAULT_REGION = "IN"
DEFAULT_LANGUAGE = "en"
DEFAULT_SORT_BY = "popularity.desc"
HINDI_LANGUAGE_CODE = "hi"


def create_tmdb_client(
    access_token: Optional[str] = None,
    api_key: Optional[str] = None,
) -> httpx.AsyncClient:
    """Build the shared TMDB client. One of access_token or api_key is required."""
    if access_token:
        return httpx.AsyncClient(
            base_url=TMDB_BASE_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=_TIMEOUT_SECONDS,
        )
    if api_key:
        return httpx.AsyncClient(
            base_url=TMDB_BASE_URL,
            params={"api_key": api_key},
            timeout=_TIMEOUT_SECONDS,
        )
    raise ConfigurationError("TMDB_ACCESS_TOKEN or TMDB_KEY must be set")


def map_movie(raw: dict[str, Any]) -> MovieSummary:
    """Reshape one TMDB result into the public movie summary."""
    poster_path = raw.get("poster_path")
    return MovieSummary(
        id=raw["id"],
        title=raw.get("title") or raw.get("original_title"),
        overview=raw.get("overview") or "",
        year=(raw.get("release_date") or "")[:4],
        poster=f"{TMDB_POSTER_BASE_URL}{poster_path}" if poster_path else None,
    )


def _unexpected_payload(path: str, e: Exception) -> UpstreamError:
    logger.error("TMDB %s returned an unexpected payload: %r", path, e)
    return UpstreamError("TMDB returned an unexpected payload")


def _to_movie_page(path: str, data: dict[str, Any], requested_page: int) -> MoviePage:
    try:
        items = [map_movie(entry) for entry in data.get("results") or []]
        return MoviePage(
            page=data.get("page") or requested_page,
            total_pages=data.get("total_pages") or 1,
            total_results=data.get("total_results") or len(items),
            items=items,
        )
    except (AttributeError, KeyError, TypeError, ValidationError) as e:
        raise _unexpected_payload(path, e) from e


def _without_none(params: dict[str, Any]) -> dict[str, Any]:
    """Drop unset params; render booleans the way TMDB expects ('true'/'false')."""
    cleaned: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        cleaned[key] = str(value).lower() if isinstance(value, bool) else value
    return cleaned


async def _get(client: httpx.AsyncClient, path: str, params: dict[str, Any]) -> dict[str, Any]:
    """GET a TMDB path and return the decoded JSON body."""
    try:
        response = await client.get(path, params=_without_none(params))
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        logger.error("TMDB %s returned HTTP %d", path, e.response.status_code)
        raise UpstreamError(f"TMDB request failed with status {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.error("TMDB %s transport error: %s", path, e)
        raise UpstreamError(f"TMDB request failed: {e}") from e
    except ValueError as e:
        raise UpstreamError("TMDB returned a non-JSON body") from e


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

async def fetch_trending(
    client: httpx.AsyncClient,
    region: str = DEFAULT_REGION,
    page: int = 1,
    lang: str = DEFAULT_LANGUAGE,
) -> MoviePage:
    """Daily trending movies."""
    data = await _get(client, "/trending/movie/day", {"region": region, "page": page, "language": lang})
    return _to_movie_page("/trending/movie/day", data, page)


async def search_movies(
    client: httpx.AsyncClient,
    query: str,
    page: int = 1,
    region: str = DEFAULT_REGION,
    lang: str = DEFAULT_LANGUAGE,
    include_adult: bool = False,
    year: Optional[int] = None,
) -> MoviePage:
    """Free-text title search, optionally restricted to a release year."""
    params = {
        "query": query,
        "page": page,
        "region": region,
        "language": lang,
        "include_adult": include_adult,
        "year": year,
    }
    data = await _get(client, "/search/movie", params)
    return _to_movie_page("/search/movie", data, page)


async def fetch_genres(client: httpx.AsyncClient, lang: str = DEFAULT_LANGUAGE) -> list[GenreEntry]:
    """The full movie genre list. Callers should go through GenreListCache."""
    path = "/genre/movie/list"
    data = await _get(client, path, {"language": lang})
    try:
        return [GenreEntry(id=genre["id"], name=genre["name"]) for genre in data.get("genres") or []]
    except (AttributeError, KeyError, TypeError, ValidationError) as e:
        raise _unexpected_payload(path, e) from e


async def discover_movies(
    client: httpx.AsyncClient,
    genre_id: Optional[str] = None,
    original_language: Optional[str] = None,
    page: int = 1,
    region: str = DEFAULT_REGION,
    lang: Optional[str] = DEFAULT_LANGUAGE,
    sort_by: str = DEFAULT_SORT_BY,
    year: Optional[int] = None,
    include_adult: bool = False,
) -> MoviePage:
    """
    Discover movies filtered by genre and/or original language.

    Args:
        genre_id: One TMDB genre id or a comma-separated list ("28,35").
        original_language: ISO 639-1 code, e.g. "hi" for Hindi-only results.
        lang: Display language for titles/overviews; None leaves TMDB's default.
        year: Primary release year.
    """
    params = {
        "with_genres": genre_id,
        "with_original_language": original_language,
        "page": page,
        "region": region,
        "language": lang,
        "sort_by": sort_by,
        "include_adult": include_adult,
        "primary_release_year": year,
    }
    data = await _get(client, "/discover/movie", params)
    return _to_movie_page("/discover/movie", data, page)
