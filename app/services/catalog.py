"""RAWG catalog client: fetches base games and normalizes them into candidate records."""

import logging

import numpy as np
import pandas as pd
import requests

from utils.parsing import normalize_keys, parse_timestamp

logger = logging.getLogger(__name__)

RAWG_ENDPOINT = "https://api.rawg.io/api/games"
MAX_RESULTS = 24
REQUEST_TIMEOUT_SEC = 10
SOURCE = "rawg"

RAWG_PLATFORM_MAP = {
    "pc": 4,
    "playstation": 18,
    "switch": 7,
    "xbox": 1,
    "mobile": 3,
}

RAWG_GENRE_MAP = {
    "rpg": "role-playing-games-rpg",
    "act": "action",
    "adv": "adventure",
    "slg": "strategy",
    "fps": "shooter",
    "indie": "indie",
}


def platform_ids(platforms):
    return sorted({RAWG_PLATFORM_MAP[p] for p in normalize_keys(platforms) if p in RAWG_PLATFORM_MAP})


def genre_slugs(genres):
    return list(dict.fromkeys(RAWG_GENRE_MAP[g] for g in normalize_keys(genres) if g in RAWG_GENRE_MAP))


def cache_key(platforms, genres):
    # Keyed on what RAWG receives, so unmapped keys and ordering share an entry
    platform_part = ",".join(str(p) for p in platform_ids(platforms))
    genre_part = ",".join(sorted(genre_slugs(genres)))
    return f"platforms={platform_part}&genres={genre_part}"


def recency_bonus(days):
    if days < 0:
        return 0.0
    if days <= 365:
        return 2.0
    if days <= 365 * 2:
        return 1.0
    if days <= 365 * 3:
        return 0.5
    return 0.0


def age_penalty(days):
    years = days / 365
    if years <= 6:
        return 0.0
    if years <= 9:
        return 1.0
    if years <= 12:
        return 2.0
    return 3.0


def popularity_hint(rating, ratings_count, metacritic, released, now=None):
    """Blend rating, log-scaled rating count, critic score and release age.

    Release age only applies when the date parses and is not in the future.
    Bracket upper bounds (1/2/3 years for the bonus, 6/9/12 for the penalty)
    are inclusive.
    """
    hint = float(rating or 0) * 8
    hint += min(12.0, float(np.log10(max(1, ratings_count or 0))) * 4)
    hint += float(metacritic or 0) / 20
    released_at = parse_timestamp(released)
    if released_at is not None:
        now = parse_timestamp(now) or pd.Timestamp.now(tz="UTC")
        days = (now - released_at).days
        if days >= 0:
            hint += recency_bonus(days) - age_penalty(days)
    return hint


def _number(value):
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0


def map_rawg_game(raw, now=None):
    platform_names = [
        ((item.get("platform") or {}).get("name") or "").strip()
        for item in raw.get("platforms") or []
    ]
    platform_names = [name for name in platform_names if name]
    genre_tags = normalize_keys((item.get("name") or "") for item in raw.get("genres") or [])

    rating = _number(raw.get("rating"))
    ratings_count = _number(raw.get("ratings_count"))
    metacritic = _number(raw.get("metacritic"))
    released = raw.get("released") if isinstance(raw.get("released"), str) else ""

    return {
        "external_source": SOURCE,
        "external_game_id": str(raw.get("id")),
        "title": (raw.get("name") or "").strip() or "Unknown title",
        "platform": ", ".join(platform_names) if platform_names else "Unknown",
        "genre_tags": genre_tags,
        "image_url": raw.get("background_image") or "",
        "score_hint": popularity_hint(rating, ratings_count, metacritic, released, now=now),
        "rating": rating,
        "metacritic": metacritic,
        "ratings_count": ratings_count,
        "released": released,
    }


class CatalogClient:
    """Fetch and normalize candidates, caching successes and failures per query."""

    def __init__(self, api_key, cache, session=None, endpoint=RAWG_ENDPOINT):
        self.api_key = (api_key or "").strip()
        self.cache = cache
        self.session = session or requests.Session()
        self.endpoint = endpoint

    def _params(self, platforms, genres):
        params = {
            "key": self.api_key,
            "page_size": str(MAX_RESULTS),
            "ordering": "-rating",
        }
        ids = platform_ids(platforms)
        if ids:
            params["platforms"] = ",".join(str(p) for p in ids)
        slugs = genre_slugs(genres)
        if slugs:
            params["genres"] = ",".join(slugs)
        return params

    def fetch_games(self, platforms=None, genres=None):
        """Return (games, error). error is None on success."""
        if not self.api_key:
            return [], "RAWG_API_KEY is not set"

        key = cache_key(platforms, genres)
        cached = self.cache.get(key) if self.cache is not None else None
        if cached is not None:
            return cached

        try:
            response = self.session.get(
                self.endpoint,
                params=self._params(platforms, genres),
                headers={"Accept": "application/json"},
                timeout=REQUEST_TIMEOUT_SEC,
            )
            if response.status_code != 200:
                logger.warning("catalog request failed with status %s", response.status_code)
                result = ([], f"catalog request failed ({response.status_code})")
            else:
                payload = response.json()
                results = (payload.get("results") or []) if isinstance(payload, dict) else None
                if not isinstance(results, list) or not all(isinstance(raw, dict) for raw in results):
                    logger.warning("catalog returned an unexpected payload: %s", type(payload).__name__)
                    result = ([], "the game catalog returned an unexpected response")
                else:
                    result = ([map_rawg_game(raw) for raw in results], None)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("catalog request error: %s", exc)
            result = ([], "could not reach the game catalog")

        if self.cache is not None:
            self.cache.set(key, result)
        return result
