import logging
import sqlite3

from app.services import ai_rerank
from app.services import shelf as shelf_service
from app.services import signals as signals_service
from recommender.constants import DEFAULT_LIMIT, GENRE_OPTIONS, MOOD_OPTIONS, PLATFORM_OPTIONS
from recommender.recommender import merge_rankings, rank_general_games, rank_personalized_games
from utils.parsing import normalize_keys

logger = logging.getLogger(__name__)

MAX_LIMIT = 12


def get_available_options():
    return {"moods": MOOD_OPTIONS, "platforms": PLATFORM_OPTIONS, "genres": GENRE_OPTIONS}


def validate_selection(values, options):
    """Keep only known option codes; unknown keys are dropped silently."""
    allowed = {option["code"] for option in options}
    return [value for value in normalize_keys(values) if value in allowed]


def clamp_limit(limit):
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, limit))


def _strongest_reason(reasons):
    best = None
    for reason in reasons or []:
        label, _, magnitude = reason.rpartition(" ")
        try:
            value = float(magnitude)
        except ValueError:
            continue
        if value > 0 and (best is None or value > best[1]):
            best = (label, value)
    return best[0] if best else None


def build_why_text(item):
    """Short fallback explanation built from the item's own score reasons."""
    game = item.get("game") or {}
    title = game.get("title") or "This game"
    genres = ", ".join((game.get("genre_tags") or [])[:2]) or "a mix of genres"
    text = f"{title} brings {genres}"
    platform = game.get("platform")
    if platform and platform != "Unknown":
        text += f" on {platform.split(',')[0].strip()}"
    reason = _strongest_reason(item.get("reasons"))
    if reason:
        text += f" and stood out for {reason}"
    return text + "."


def recommend_for_actor(actor_id, catalog, moods=None, platforms=None, genres=None, limit=DEFAULT_LIMIT, use_ai=False, ai_settings=None, record=True, now=None):
    """Fetch, rank, optionally re-rank, explain and log one recommendation round.

    Returns (items, notices). Catalog and AI problems become notices; the
    engine's own ranking is always returned when candidates exist.
    """
    moods = validate_selection(moods, MOOD_OPTIONS)
    platforms = validate_selection(platforms, PLATFORM_OPTIONS)
    genres = validate_selection(genres, GENRE_OPTIONS)
    limit = clamp_limit(limit)
    notices = []

    games, error = catalog.fetch_games(platforms=platforms, genres=genres)
    if error:
        notices.append(error)
    if not games:
        return [], notices

    interactions = signals_service.list_history(actor_id)
    states = shelf_service.list_states(actor_id)

    personalized = rank_personalized_games(games, interactions, states, moods, platforms, genres, limit=limit, now=now)
    general = rank_general_games(games, interactions, states, moods, platforms, genres, limit=limit, now=now)
    items = merge_rankings(personalized, general, limit=limit)

    reasons_by_key = {}
    if use_ai and items:
        ai_settings = ai_settings or {}
        items, reasons_by_key, ai_error = ai_rerank.rerank_with_ai(
            items,
            moods=moods,
            platforms=platforms,
            genres=genres,
            interactions=interactions,
            api_key=ai_settings.get("api_key"),
            model=ai_settings.get("model") or ai_rerank.DEFAULT_MODEL,
            base_url=ai_settings.get("base_url") or ai_rerank.DEFAULT_BASE_URL,
        )
        if ai_error:
            notices.append(ai_error)

    for item in items:
        item["why_text"] = reasons_by_key.get(item.get("key")) or build_why_text(item)

    if record and items:
        try:
            signals_service.record_shown(actor_id, items, context_tags=",".join(moods))
        except sqlite3.Error as exc:
            logger.exception("could not record shown events for %s", actor_id)
            notices.append(f"could not save recommendation history: {exc}")

    return items, notices
