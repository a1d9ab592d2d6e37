"""Group a user's interaction log and shelf states by candidate identity."""

from recommender.constants import SHOWN_ACTIONS
from utils.parsing import parse_timestamp


def candidate_key(source, external_id):
    """Return the "source:id" identity, or None when either part is missing."""
    if source is None or external_id is None:
        return None
    source = str(source).strip()
    external_id = str(external_id).strip()
    if not source or not external_id:
        return None
    return f"{source}:{external_id}"


def game_key(game):
    return candidate_key(game.get("external_source"), game.get("external_game_id"))


def group_history(interactions, states):
    """Build (events by key, shelf state by key) lookups.

    Events without a candidate reference (legacy rows) are skipped. Event
    lists keep input order; a later state row for the same key wins.
    """
    history_by_key = {}
    for event in interactions or []:
        key = candidate_key(event.get("external_source"), event.get("external_game_id"))
        if key is None:
            continue
        history_by_key.setdefault(key, []).append(event)

    state_by_key = {}
    for state in states or []:
        key = candidate_key(state.get("external_source"), state.get("external_game_id"))
        if key is None:
            continue
        state_by_key[key] = state

    return history_by_key, state_by_key


def count_actions(events, actions):
    return sum(1 for event in events if event.get("action") in actions)


def latest_shown_at(events):
    """Most recent timestamp among "shown" events, or None."""
    latest = None
    for event in events or []:
        if event.get("action") not in SHOWN_ACTIONS:
            continue
        ts = parse_timestamp(event.get("created_at"))
        if ts is None:
            continue
        if latest is None or ts > latest:
            latest = ts
    return latest
