import pytest

NOW = "2026-03-01T00:00:00+00:00"


def _game(game_id, title, platform, genres, score_hint, rating, metacritic, ratings_count, released):
    return {
        "external_source": "rawg",
        "external_game_id": game_id,
        "title": title,
        "platform": platform,
        "genre_tags": genres,
        "image_url": "",
        "score_hint": score_hint,
        "rating": rating,
        "metacritic": metacritic,
        "ratings_count": ratings_count,
        "released": released,
    }


def build_games():
    return [
        _game("g1", "Hard Ops", "PC", ["action", "shooter"], 62, 4.9, 88, 3200, "2024-10-01"),
        _game("g2", "Cozy Garden", "PC", ["simulation", "casual"], 41, 4.1, 78, 800, "2024-07-10"),
        _game("g3", "Story Echoes", "PS5", ["adventure", "role-playing"], 49, 4.5, 85, 1400, "2023-12-20"),
        _game("g4", "Arena Clash", "PS5", ["action", "fighting"], 60, 4.8, 90, 2500, "2024-09-18"),
    ]


class FakeCatalog:
    """Stands in for the RAWG client; returns a fixed pool and records calls."""

    def __init__(self, games=None, error=None):
        self.games = games if games is not None else build_games()
        self.error = error
        self.calls = []

    def fetch_games(self, platforms=None, genres=None):
        self.calls.append((list(platforms or []), list(genres or [])))
        return list(self.games), self.error


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def games():
    return build_games()


@pytest.fixture()
def make_event():
    counter = {"n": 0}

    def _make(game_id, action, context_tags="", created_at="2026-02-15T00:00:00.000Z", source="rawg"):
        counter["n"] += 1
        return {
            "id": f"{game_id}-{action}-{counter['n']}",
            "user_id": "u",
            "external_source": source,
            "external_game_id": game_id,
            "game_title_snapshot": game_id,
            "action": action,
            "context_tags": context_tags,
            "created_at": created_at,
        }

    return _make


@pytest.fixture()
def make_state():
    def _make(game_id, liked=False, played=False, disliked=False, dont_recommend=False, source="rawg"):
        return {
            "external_source": source,
            "external_game_id": game_id,
            "liked": liked,
            "played": played,
            "disliked": disliked,
            "dont_recommend": dont_recommend,
        }

    return _make


@pytest.fixture()
def fake_catalog():
    return FakeCatalog()


@pytest.fixture()
def app_client(tmp_path, monkeypatch, fake_catalog):
    """Create an isolated Flask test client backed by a temporary sqlite DB."""
    db_path = tmp_path / "test.db"
    monkeypatch.setenv("GAMESHELF_DB_PATH", str(db_path))
    monkeypatch.setenv("FLASK_SECRET_KEY", "test-secret-key-0123456789")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("RAWG_API_KEY", raising=False)

    from app.app import create_app

    app = create_app(catalog=fake_catalog)
    app.config.update(TESTING=True)

    with app.test_client() as client:
        yield app, client, db_path
