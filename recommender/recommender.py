"""Entry points that run history grouping, mood inference, scoring and diversification."""

import pandas as pd

from recommender.affinity import compute_mood_affinity, preferred_mood_tags
from recommender.constants import DEFAULT_LIMIT, GENERAL, PERSONALIZED
from recommender.diversify import diversify
from recommender.history import game_key, group_history
from recommender.scoring import mode_weights, score_game
from utils.parsing import parse_timestamp


def rank_games(
    games,
    interactions,
    states,
    moods=None,
    platforms=None,
    genres=None,
    limit=DEFAULT_LIMIT,
    mode=PERSONALIZED,
    now=None,
):
    """Rank a candidate pool for one actor.

    Platform and genre selections are accepted so both modes share one call
    shape; the catalog fetch has already filtered on them, so they carry no
    weight here. Pass ``now`` to get a reproducible result.
    """
    mode_weights(mode)  # raises on an unknown mode even for an empty pool
    now = parse_timestamp(now) or pd.Timestamp.now(tz="UTC")

    history_by_key, state_by_key = group_history(interactions, states)
    affinity = compute_mood_affinity(interactions)
    mood_tags = preferred_mood_tags(moods, affinity)

    scored = []
    for game in games or []:
        key = game_key(game)
        result = score_game(
            game,
            history_by_key.get(key, []),
            state_by_key.get(key),
            mood_tags,
            affinity,
            mode=mode,
            now=now,
        )
        if result is not None:
            scored.append(result)

    return diversify(scored, limit, mode)


def rank_personalized_games(games, interactions, states, moods=None, platforms=None, genres=None, limit=DEFAULT_LIMIT, now=None):
    """Behavior-driven ranking for the "picked for you" surface."""
    return rank_games(games, interactions, states, moods, platforms, genres, limit=limit, mode=PERSONALIZED, now=now)


def rank_general_games(games, interactions, states, moods=None, platforms=None, genres=None, limit=DEFAULT_LIMIT, now=None):
    """Popularity-leaning fallback ranking used to fill remaining slots."""
    return rank_games(games, interactions, states, moods, platforms, genres, limit=limit, mode=GENERAL, now=now)


def merge_rankings(personalized, general, limit=DEFAULT_LIMIT):
    """Keep personalized picks first, then fill with unseen general picks.

    Items without a candidate key can't be matched across the two lists, so
    each one is kept by its position instead of being deduplicated.
    """
    merged = []
    seen = set()
    for source, ranked in (("personalized", personalized), ("general", general)):
        for index, item in enumerate(ranked or []):
            if len(merged) >= limit:
                return merged
            key = item.get("key") or game_key(item.get("game") or {}) or (source, index)
            if key in seen:
                continue
            seen.add(key)
            merged.append(item)
    return merged
