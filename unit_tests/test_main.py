"""Unit tests for the api.main FastAPI routes and error mapping."""

import json
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient
from openai import AsyncOpenAI, OpenAIError

from api.main import create_app, health_check, parse_generation_request
from api.settings import Settings
from db.genre_cache import GenreListCache
from db.review_store import ReviewStore
from db.tmdb import TMDB_BASE_URL
from implementation.classes.errors import InputError

RAW_MOVIE = {"id": 1, "title": "Pathaan", "release_date": "2023-01-25", "poster_path": "/p.jpg"}


class FakeTmdb:
    """Records TMDB requests and answers with canned bodies keyed by path."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.results: list[dict[str, Any]] = [RAW_MOVIE]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/genre/movie/list"):
            return httpx.Response(200, json={"genres": [{"id": 28, "name": "Action"}]})
        return httpx.Response(200, json={"page": 1, "total_pages": 3, "total_results": 41, "results": self.results})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=TMDB_BASE_URL, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_tmdb() -> FakeTmdb:
    return FakeTmdb()


@pytest.fixture
def api_factory(fake_tmdb, llm_client_factory):
    """Build a TestClient around an app with fake upstream clients."""

    def _factory(
        content: Any = "{}",
        side_effect=None,
        with_llm: bool = True,
        raise_server_exceptions: bool = True,
        **settings: Any,
    ):
        llm_client = llm_client_factory(content=content, side_effect=side_effect) if with_llm else None
        app = create_app(
            Settings(**settings),
            tmdb_client=fake_tmdb.client(),
            llm_client=llm_client,
            genre_cache=GenreListCache(),
            review_store=ReviewStore(),
        )
        return TestClient(app, raise_server_exceptions=raise_server_exceptions), llm_client

    return _factory


# ================================
#  Health
# ================================


@pytest.mark.asyncio
async def test_health_check_reports_ok() -> None:
    result = await health_check()
    assert result["ok"] is True
    assert "T" in result["time"]


# ================================
#  Catalog proxy
# ================================


def test_trending_returns_reshaped_page(api_factory, fake_tmdb) -> None:
    client, _ = api_factory()
    response = client.get("/api/trending", params={"page": 2, "region": "US"})

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["total_results"] == 41
    assert body["items"][0] == {
        "id": 1,
        "title": "Pathaan",
        "overview": "",
        "year": "2023",
        "poster": "https://image.tmdb.org/t/p/w500/p.jpg",
    }
    assert fake_tmdb.requests[0].url.params["region"] == "US"


def test_search_requires_query(api_factory, fake_tmdb) -> None:
    client, _ = api_factory()
    response = client.get("/api/search")
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "q required"}
    assert fake_tmdb.requests == []


def test_search_forwards_include_adult_and_year(api_factory, fake_tmdb) -> None:
    client, _ = api_factory()
    response = client.get("/api/search", params={"q": "pathaan", "includeAdult": "true", "year": 2023})
    assert response.status_code == 200
    params = fake_tmdb.requests[0].url.params
    assert params["include_adult"] == "true"
    assert params["year"] == "2023"


def test_invalid_query_param_type_is_bad_request(api_factory) -> None:
    client, _ = api_factory()
    response = client.get("/api/trending", params={"page": "abc"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "bad_request"
    assert body["details"][0]["path"] == ["query", "page"]


def test_genres_are_cached_between_requests(api_factory, fake_tmdb) -> None:
    client, _ = api_factory()
    first = client.get("/api/genres").json()
    second = client.get("/api/genres").json()

    assert first == second == {"ok": True, "items": [{"id": 28, "name": "Action"}]}
    assert len(fake_tmdb.requests) == 1


@pytest.mark.parametrize(
    ("path", "message"),
    [
        ("/api/movies/by-genre", "genreId required (e.g. 28 or 28,35)"),
        ("/api/movies/hindi/by-genre", "genreId required"),
    ],
)
def test_genre_discovery_requires_genre_id(api_factory, path: str, message: str) -> None:
    client, _ = api_factory()
    response = client.get(path)
    assert response.status_code == 400
    assert response.json()["error"] == message


def test_hindi_by_genre_filters_language_and_genre(api_factory, fake_tmdb) -> None:
    client, _ = api_factory()
    response = client.get("/api/movies/hindi/by-genre", params={"genreId": "28,35", "sortBy": "vote_average.desc"})
    assert response.status_code == 200
    params = fake_tmdb.requests[0].url.params
    assert params["with_original_language"] == "hi"
    assert params["with_genres"] == "28,35"
    assert params["sort_by"] == "vote_average.desc"


def test_hindi_movies_filters_language(api_factory, fake_tmdb) -> None:
    client, _ = api_factory()
    assert client.get("/api/movies/hindi").status_code == 200
    assert fake_tmdb.requests[0].url.params["with_original_language"] == "hi"
    assert "with_genres" not in fake_tmdb.requests[0].url.params


# ================================
#  Generation
# ================================


@pytest.mark.parametrize("body", [{}, {"title": ""}, {"title": "   "}, {"title": 42}, {"year": 2024}])
def test_review_without_title_fails_before_upstream_call(api_factory, body) -> None:
    """A missing title yields 400 'title required' and never reaches the model."""
    client, llm_client = api_factory()
    response = client.post("/api/review", json=body)
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "title required"}
    llm_client.chat.completions.create.assert_not_awaited()


def test_script_without_title_is_checked_before_missing_credential(api_factory) -> None:
    client, _ = api_factory(with_llm=False)
    response = client.post("/api/scripts", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "title required"


def test_script_without_llm_credential_is_server_error(api_factory) -> None:
    client, _ = api_factory(with_llm=False)
    response = client.post("/api/scripts", json={"title": "Pathaan"})
    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "OPENAI_API_KEY missing"}


def test_script_success(api_factory, script_payload_factory) -> None:
    client, llm_client = api_factory(content=f"```json\n{json.dumps(script_payload_factory())}\n```")
    response = client.post("/api/scripts", json={"title": "Pathaan", "year": "2023", "style": {"tone": "chill"}})

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["script"]["title"] == "Pathaan"
    assert len(body["script"]["beats"]) == 6
    prompt = llm_client.chat.completions.create.await_args.kwargs["messages"][1]["content"]
    assert '"Pathaan (2023)"' in prompt
    assert "Tone: chill" in prompt


def test_script_uses_configured_model_and_env_style(api_factory, script_payload_factory) -> None:
    client, llm_client = api_factory(
        content=json.dumps(script_payload_factory()),
        openai_model="gpt-custom",
        style_override_json='{"emoji": "none"}',
    )
    assert client.post("/api/scripts", json={"title": "Pathaan"}).status_code == 200
    kwargs = llm_client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "gpt-custom"
    assert "Emoji: none" in kwargs["messages"][1]["content"]


def test_review_success_serializes_camel_case(api_factory, review_payload_factory) -> None:
    client, _ = api_factory(content=json.dumps(review_payload_factory()))
    response = client.post("/api/review", json={"title": "Pathaan", "overview": "Spy action."})

    assert response.status_code == 200
    review = response.json()["review"]
    assert review["title"] == "Pathaan"
    assert review["oneLiner"] == "Full paisa vasool heist."
    assert set(review["ratings"]) == {"overall", "story", "acting", "direction", "action", "music", "vfx"}


def test_review_validation_failure_is_bad_request_with_details(api_factory, review_payload_factory) -> None:
    payload = review_payload_factory()
    payload["ratings"]["overall"] = 11
    client, _ = api_factory(content=json.dumps(payload))

    response = client.post("/api/review", json={"title": "Pathaan"})

    assert response.status_code == 400
    body = response.json()
    assert body["ok"] is False
    assert body["error"] == "bad_request"
    assert body["details"][0]["path"] == ["ratings", "overall"]


def test_malformed_model_output_is_server_error(api_factory) -> None:
    client, _ = api_factory(content="I loved this movie, truly a masterpiece.")
    response = client.post("/api/review", json={"title": "Pathaan"})
    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "Invalid JSON returned by model"}


def test_upstream_error_is_server_error(api_factory) -> None:
    client, _ = api_factory(side_effect=OpenAIError("provider down"))
    response = client.post("/api/scripts", json={"title": "Pathaan"})
    assert response.status_code == 500
    assert "provider down" in response.json()["error"]


@pytest.mark.parametrize("year", ["twenty", "²", "٢٠٢٣", "-5", -5, -5.0, 1999.5, True, [2023]])
def test_bad_year_is_input_error(api_factory, year) -> None:
    """Anything but a non-negative int or ASCII digit string is a 400, never a 500."""
    client, llm_client = api_factory()
    response = client.post("/api/scripts", json={"title": "Pathaan", "year": year})
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "year must be an integer"}
    llm_client.chat.completions.create.assert_not_awaited()


@pytest.mark.parametrize(("year", "expected"), [(2023, 2023), ("2023", 2023), (" 2023 ", 2023), (2023.0, 2023), ("", None), (None, None)])
def test_parse_generation_request_accepts_integer_years(year, expected) -> None:
    subject, _ = parse_generation_request({"title": "Dune", "year": year})
    assert subject.year == expected


def test_unexpected_error_is_server_error_with_message(api_factory) -> None:
    """A non-gateway exception still returns the {ok: false, error} shape."""
    client, _ = api_factory(side_effect=RuntimeError("boom"), raise_server_exceptions=False)
    response = client.post("/api/scripts", json={"title": "Pathaan"})
    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "boom"}


def test_malformed_tmdb_result_is_upstream_error(api_factory, fake_tmdb) -> None:
    """A TMDB result without an id is reported as an upstream failure, not a KeyError."""
    fake_tmdb.results = [{"title": "x"}]
    client, _ = api_factory()
    response = client.get("/api/trending")
    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "TMDB returned an unexpected payload"}


def test_parse_generation_request_ignores_non_object_style() -> None:
    subject, style = parse_generation_request({"title": " Dune ", "year": 2021, "style": "loud", "overview": 5})
    assert subject.title == "Dune"
    assert subject.year == 2021
    assert subject.overview is None
    assert style is None


def test_parse_generation_request_rejects_non_object_body() -> None:
    with pytest.raises(InputError):
        parse_generation_request(["title"])


# ================================
#  User review store
# ================================


def test_user_reviews_round_trip(api_factory) -> None:
    client, _ = api_factory()
    created = client.post("/api/reviews", json={"movieId": 42, "text": "Mast movie", "rating": 9})
    client.post("/api/reviews", json={"movieId": 7, "text": "Other"})

    assert created.status_code == 200
    assert created.json()["review"]["movieId"] == 42

    listed = client.get("/api/reviews/42").json()
    assert listed["ok"] is True
    assert [item["text"] for item in listed["items"]] == ["Mast movie"]
    assert listed["items"][0]["rating"] == 9


@pytest.mark.parametrize("body", [{}, {"movieId": 42}, {"text": "no id"}, {"movieId": 42, "text": ""}])
def test_user_review_requires_movie_id_and_text(api_factory, body) -> None:
    client, _ = api_factory()
    response = client.post("/api/reviews", json=body)
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "movieId & text required"}


# ================================
#  Lifespan
# ================================


def test_lifespan_creates_and_closes_clients_from_settings() -> None:
    app = create_app(Settings(openai_api_key="sk-test", tmdb_api_key="v3key"))
    with TestClient(app):
        assert isinstance(app.state.llm_client, AsyncOpenAI)
        assert isinstance(app.state.tmdb_client, httpx.AsyncClient)
    assert app.state.tmdb_client.is_closed


def test_lifespan_configures_logging_at_configured_level(mocker) -> None:
    """Serving via `uvicorn api.main:app` should still get a root handler at LOG_LEVEL."""
    basic_config = mocker.patch("api.main.logging.basicConfig")
    with TestClient(create_app(Settings(log_level="DEBUG"))):
        pass
    basic_config.assert_called_once()
    assert basic_config.call_args.kwargs["level"] == "DEBUG"


def test_lifespan_without_credentials_leaves_clients_unset() -> None:
    app = create_app(Settings())
    with TestClient(app) as client:
        assert app.state.llm_client is None
        response = client.get("/api/genres")
    assert response.status_code == 500
    assert response.json()["error"] == "TMDB_ACCESS_TOKEN or TMDB_KEY missing"
