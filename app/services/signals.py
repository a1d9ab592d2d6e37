"""Interaction logging: explicit user actions and the "shown" entries written after each recommendation."""

import logging
from datetime import datetime, timezone

from app.repos import events as events_repo
from recommender.constants import EVENT_ACTIONS
from utils.parsing import parse_tags

logger = logging.getLogger(__name__)


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def record_event(user_id, action, external_source=None, external_game_id=None, context_tags="", title=None):
    """Append one interaction. Returns an error string for invalid input, else None."""
    action = (action or "").strip().lower()
    if action not in EVENT_ACTIONS:
        return f"action must be one of: {', '.join(EVENT_ACTIONS)}"
    external_source = (external_source or "").strip() or None
    external_game_id = (str(external_game_id).strip() if external_game_id is not None else "") or None
    if action != "reroll" and not (external_source and external_game_id):
        return "external_source and external_game_id are required"
    tags = ",".join(parse_tags(context_tags))
    events_repo.insert(
        user_id,
        action,
        external_source=external_source,
        external_game_id=external_game_id,
        context_tags=tags,
        title=(title or "").strip() or None,
        created_at=_now_iso(),
    )
    return None


def record_shown(user_id, items, context_tags=""):
    """Write one "shown" event per displayed item, keeping its why text."""
    created_at = _now_iso()
    tags = ",".join(parse_tags(context_tags))
    rows = []
    for item in items:
        game = item.get("game") or {}
        rows.append(
            (
                user_id,
                game.get("external_source"),
                game.get("external_game_id"),
                game.get("title"),
                "shown",
                tags,
                item.get("why_text"),
                created_at,
            )
        )
    count = events_repo.insert_many(rows)
    logger.debug("recorded %d shown events for %s", count, user_id)
    return count


def list_history(user_id):
    return events_repo.list_by_user(user_id)


def get_event_counts(user_id):
    return events_repo.count_by_action(user_id)
