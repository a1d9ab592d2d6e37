"""Implicit mood preference derived from the context tags on past interactions."""

from recommender.constants import INFERRED_MOOD_LIMIT, MOOD_AFFINITY_WEIGHTS
from utils.parsing import normalize_keys, parse_tags


def compute_mood_affinity(interactions):
    """Accumulate a signed score per context tag.

    Each event adds its action weight (like +2, played +1, not now -1,
    don't recommend -3) once to every distinct tag it carries. Shown and
    other neutral actions add nothing. The returned dict keeps the order in
    which tags were first encountered.
    """
    affinity = {}
    for event in interactions or []:
        weight = MOOD_AFFINITY_WEIGHTS.get(event.get("action"))
        if not weight:
            continue
        for tag in parse_tags(event.get("context_tags")):
            affinity[tag] = affinity.get(tag, 0) + weight
    return affinity


def preferred_mood_tags(explicit_selection, affinity, limit=INFERRED_MOOD_LIMIT):
    """Return the mood tags to score against.

    An explicit, non-empty selection always wins. Otherwise fall back to the
    top tags with positive affinity (ties keep encounter order).
    """
    explicit = normalize_keys(explicit_selection)
    if explicit:
        return explicit
    positive = [(tag, score) for tag, score in (affinity or {}).items() if score > 0]
    # sorted() is stable, so equal scores stay in encounter order
    positive = sorted(positive, key=lambda kv: kv[1], reverse=True)
    return [tag for tag, _ in positive[:limit]]
