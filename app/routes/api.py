from functools import wraps

from flask import Blueprint, current_app, g, jsonify, request, session

from app.services import recommendations as rec_service
from app.services import shelf as shelf_service
from app.services import signals as signals_service
from utils.parsing import parse_bool

api_bp = Blueprint("api", __name__, url_prefix="/api")

ANON_HEADER = "X-Anon-Id"


def _actor_id():
    user_id = (session.get("user_id") or "").strip().lower()
    if user_id:
        return user_id
    anon_id = (request.headers.get(ANON_HEADER) or "").strip()
    if anon_id:
        return f"anon:{anon_id}"
    return None


def actor_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        actor_id = _actor_id()
        if not actor_id:
            return jsonify({"error": "actor required"}), 401
        g.actor_id = actor_id
        return fn(*args, **kwargs)

    return wrapper


def _parse_list(value):
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [v.strip() for v in str(value).split(",") if v.strip()]


def _serialize_item(item):
    game = item.get("game") or {}
    return {
        "key": item.get("key"),
        "external_source": game.get("external_source"),
        "external_game_id": game.get("external_game_id"),
        "title": game.get("title"),
        "platform": game.get("platform"),
        "genre_tags": game.get("genre_tags") or [],
        "image_url": game.get("image_url"),
        "released": game.get("released"),
        "score": round(float(item.get("score") or 0), 3),
        "reasons": item.get("reasons") or [],
        "mood_keys": item.get("mood_keys") or [],
        "why_text": item.get("why_text"),
    }


@api_bp.get("/filters")
def get_filters():
    return jsonify(rec_service.get_available_options())


@api_bp.post("/recommendations")
@actor_required
def recommend():
    data = request.get_json(silent=True) or {}
    config = current_app.config
    items, notices = rec_service.recommend_for_actor(
        g.actor_id,
        current_app.extensions["gameshelf.catalog"],
        moods=_parse_list(data.get("moods")),
        platforms=_parse_list(data.get("platforms")),
        genres=_parse_list(data.get("genres")),
        limit=data.get("limit"),
        use_ai=parse_bool(data.get("ai"), default=bool(config.get("OPENAI_API_KEY"))),
        ai_settings={
            "api_key": config.get("OPENAI_API_KEY"),
            "model": config.get("OPENAI_MODEL"),
            "base_url": config.get("OPENAI_BASE_URL"),
        },
    )
    return jsonify({"items": [_serialize_item(item) for item in items], "notices": notices})


@api_bp.post("/events")
@actor_required
def create_event():
    data = request.get_json(silent=True) or {}
    error = signals_service.record_event(
        g.actor_id,
        data.get("action"),
        external_source=data.get("external_source"),
        external_game_id=data.get("external_game_id"),
        context_tags=data.get("context_tags") or "",
        title=data.get("game_title_snapshot"),
    )
    if error:
        return jsonify({"error": error}), 400
    return jsonify({"ok": True}), 201


@api_bp.get("/events/summary")
@actor_required
def event_summary():
    return jsonify({"counts": signals_service.get_event_counts(g.actor_id)})


@api_bp.get("/game-states")
@actor_required
def list_game_states():
    sort = (request.args.get("sort") or "recent").strip()
    if sort not in {"recent", "alpha"}:
        sort = "recent"
    return jsonify({"items": shelf_service.list_states(g.actor_id, sort=sort)})


@api_bp.put("/game-states")
@actor_required
def put_game_state():
    data = request.get_json(silent=True) or {}
    error = shelf_service.set_state(
        g.actor_id,
        data.get("external_source"),
        data.get("external_game_id"),
        liked=parse_bool(data.get("liked")),
        played=parse_bool(data.get("played")),
        disliked=parse_bool(data.get("disliked")),
        dont_recommend=parse_bool(data.get("dont_recommend")),
        title=data.get("game_title_snapshot"),
    )
    if error:
        return jsonify({"error": error}), 400
    state = shelf_service.get_state(g.actor_id, data.get("external_source"), data.get("external_game_id"))
    return jsonify({"ok": True, "state": state})


@api_bp.delete("/game-states")
@actor_required
def delete_game_state():
    data = request.get_json(silent=True) or {}
    error = shelf_service.remove_state(g.actor_id, data.get("external_source"), data.get("external_game_id"))
    if error:
        return jsonify({"error": error}), 400
    return jsonify({"ok": True})
