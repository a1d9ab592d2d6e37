import pandas as pd
import pytest
import requests

from app.services.catalog import CatalogClient, cache_key, map_rawg_game, popularity_hint
from utils.cache import TTLCache

NOW = pd.Timestamp("2026-03-01T00:00:00Z")


def _days_ago(days):
    return (NOW - pd.Timedelta(days=days)).strftime("%Y-%m-%d")


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params})
        if self.exc is not None:
            raise self.exc
        return self.response


RAW_GAME = {
    "id": 3498,
    "name": " Grand Quest ",
    "background_image": "https://img.example/3498.jpg",
    "rating": 4.0,
    "ratings_count": 1000,
    "metacritic": 80,
    "released": "",
    "genres": [{"name": "Action"}, {"name": "action"}, {"name": "RPG"}, {"name": None}],
    "platforms": [{"platform": {"name": "PC"}}, {"platform": {"name": "PlayStation 5"}}, {"platform": {}}],
}


def test_popularity_hint_without_release_date():
    assert popularity_hint(4.0, 1000, 80, "", now=NOW) == pytest.approx(32 + 12 + 4)
    assert popularity_hint(4.0, 1000, 80, "not-a-date", now=NOW) == pytest.approx(48)
    assert popularity_hint(0, 0, 0, None, now=NOW) == pytest.approx(0)


def test_rating_count_term_is_capped():
    assert popularity_hint(0, 10 ** 9, 0, "", now=NOW) == pytest.approx(12)
    assert popularity_hint(0, 10, 0, "", now=NOW) == pytest.approx(4)


@pytest.mark.parametrize(
    "days, adjustment",
    [
        (100, 2.0),
        (365, 2.0),
        (366, 1.0),
        (730, 1.0),
        (1095, 0.5),
        (1096, 0.0),
        (365 * 4, 0.0),
        (365 * 6, 0.0),
        (365 * 6 + 1, -1.0),
        (365 * 9, -1.0),
        (365 * 12, -2.0),
        (365 * 12 + 1, -3.0),
    ],
)
def test_release_age_brackets(days, adjustment):
    base = popularity_hint(4.0, 1000, 80, "", now=NOW)
    assert popularity_hint(4.0, 1000, 80, _days_ago(days), now=NOW) - base == pytest.approx(adjustment)


def test_future_release_contributes_nothing():
    future = (NOW + pd.Timedelta(days=30)).strftime("%Y-%m-%d")
    assert popularity_hint(4.0, 1000, 80, future, now=NOW) == pytest.approx(48)


def test_map_rawg_game_normalizes_record():
    game = map_rawg_game(RAW_GAME, now=NOW)
    assert game["external_source"] == "rawg"
    assert game["external_game_id"] == "3498"
    assert game["title"] == "Grand Quest"
    assert game["platform"] == "PC, PlayStation 5"
    assert game["genre_tags"] == ["action", "rpg"]
    assert game["score_hint"] == pytest.approx(48)


def test_map_rawg_game_tolerates_missing_fields():
    game = map_rawg_game({"id": 7}, now=NOW)
    assert game["title"] == "Unknown title"
    assert game["platform"] == "Unknown"
    assert game["genre_tags"] == []
    assert game["rating"] == 0
    assert game["released"] == ""


def test_cache_key_is_order_insensitive():
    assert cache_key(["xbox", "PC"], ["rpg"]) == cache_key(["pc", "xbox", "pc"], ["RPG"])


def test_cache_key_ignores_unmapped_filters():
    assert cache_key(["pc", "switch", "unknown"], ["rpg", "bogus"]) == cache_key(["switch", "pc"], ["rpg"])
    assert cache_key(["unknown"], []) == cache_key([], None)
    assert cache_key(["pc"], []) != cache_key(["switch"], [])


def test_fetch_maps_filters_and_caches():
    session = FakeSession(FakeResponse(200, {"results": [RAW_GAME]}))
    client = CatalogClient("key-123", TTLCache(600), session=session)

    games, error = client.fetch_games(platforms=["pc", "switch", "unknown"], genres=["rpg", "act"])
    assert error is None
    assert [g["external_game_id"] for g in games] == ["3498"]
    params = session.calls[0]["params"]
    assert params["key"] == "key-123"
    assert params["page_size"] == "24"
    assert params["ordering"] == "-rating"
    assert params["platforms"] == "4,7"
    assert params["genres"] == "role-playing-games-rpg,action"

    client.fetch_games(platforms=["switch", "pc"], genres=["act", "rpg"])
    assert len(session.calls) == 1


def test_cache_expiry_triggers_refetch():
    clock = {"t": 1000.0}
    session = FakeSession(FakeResponse(200, {"results": []}))
    client = CatalogClient("key", TTLCache(600, clock=lambda: clock["t"]), session=session)
    client.fetch_games()
    clock["t"] += 601
    client.fetch_games()
    assert len(session.calls) == 2


def test_missing_api_key_returns_error_without_request():
    session = FakeSession(FakeResponse(200, {"results": [RAW_GAME]}))
    games, error = CatalogClient("", TTLCache(600), session=session).fetch_games()
    assert games == []
    assert "RAWG_API_KEY" in error
    assert session.calls == []


def test_http_failure_is_reported_and_cached():
    session = FakeSession(FakeResponse(503, {}))
    client = CatalogClient("key", TTLCache(600), session=session)
    games, error = client.fetch_games(platforms=["pc"])
    assert games == []
    assert "503" in error
    assert client.fetch_games(platforms=["pc"]) == ([], error)
    assert len(session.calls) == 1


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(exc=requests.ConnectionError("boom")),
        FakeSession(FakeResponse(200, ValueError("bad json"))),
        FakeSession(FakeResponse(200, ["unexpected"])),
        FakeSession(FakeResponse(200, None)),
        FakeSession(FakeResponse(200, {"results": "not-a-list"})),
        FakeSession(FakeResponse(200, {"results": [RAW_GAME, "junk"]})),
    ],
)
def test_network_and_payload_errors_become_messages(session):
    client = CatalogClient("key", TTLCache(600), session=session)
    games, error = client.fetch_games()
    assert games == []
    assert error
    assert client.fetch_games() == ([], error)
    assert len(session.calls) == 1


def test_empty_results_object_is_a_success():
    session = FakeSession(FakeResponse(200, {"count": 0}))
    games, error = CatalogClient("key", TTLCache(600), session=session).fetch_games()
    assert games == []
    assert error is None
