"""Service layer for shelf state toggles and their exclusivity rules."""

from datetime import datetime, timezone

from app.repos import game_states as game_states_repo


def normalize_state(liked=False, played=False, disliked=False, dont_recommend=False):
    """Apply the shelf invariants before anything is stored.

    disliked clears liked; dont_recommend implies disliked and clears liked.
    """
    liked = bool(liked)
    played = bool(played)
    disliked = bool(disliked)
    dont_recommend = bool(dont_recommend)
    if dont_recommend:
        disliked = True
    if disliked:
        liked = False
    return {
        "liked": liked,
        "played": played,
        "disliked": disliked,
        "dont_recommend": dont_recommend,
    }


def _identity(external_source, external_game_id):
    source = (external_source or "").strip()
    game_id = str(external_game_id).strip() if external_game_id is not None else ""
    return source, game_id


def list_states(user_id, sort="recent"):
    return game_states_repo.list_by_user(user_id, sort=sort)


def get_state(user_id, external_source, external_game_id):
    source, game_id = _identity(external_source, external_game_id)
    return game_states_repo.get(user_id, source, game_id)


def set_state(user_id, external_source, external_game_id, liked=False, played=False, disliked=False, dont_recommend=False, title=None):
    """Upsert a normalized state. Returns an error string, or None on success."""
    source, game_id = _identity(external_source, external_game_id)
    if not source or not game_id:
        return "external_source and external_game_id are required"
    state = normalize_state(liked, played, disliked, dont_recommend)
    game_states_repo.upsert(
        user_id,
        source,
        game_id,
        (title or "").strip() or None,
        state["liked"],
        state["played"],
        state["disliked"],
        state["dont_recommend"],
        datetime.now(timezone.utc).isoformat(),
    )
    return None


def remove_state(user_id, external_source, external_game_id):
    source, game_id = _identity(external_source, external_game_id)
    if not source or not game_id:
        return "external_source and external_game_id are required"
    game_states_repo.delete(user_id, source, game_id)
    return None
