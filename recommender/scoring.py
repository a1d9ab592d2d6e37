"""Additive, explainable scoring of one candidate game."""

import numpy as np
import pandas as pd

from recommender.constants import (
    LIKE_ACTIONS,
    LIKE_CAP,
    MOOD_AFFINITY_CLAMP,
    MOOD_GENRE_KEYWORDS,
    NOT_NOW_ACTIONS,
    NOT_NOW_CAP,
    PERSONALIZED,
    PLAYED_ACTIONS,
    PLAYED_CAP,
    POPULARITY_SCALE,
    SHOWN_ACTIONS,
    SHOWN_CAP,
    SHOWN_COOLDOWN_HOURS,
    WEIGHTS,
)
from recommender.history import count_actions, game_key, latest_shown_at
from utils.parsing import normalize_keys, parse_timestamp


def mode_weights(mode):
    """Return the weight profile for a ranking mode."""
    weights = WEIGHTS.get((mode or PERSONALIZED).lower())
    if weights is None:
        raise ValueError(f"unknown ranking mode: {mode}")
    return weights


def _keyword_match(tag, keyword):
    return keyword in tag or tag in keyword


def mood_keyword_hits(genre_tags):
    """Map each mood key to how many of the genre tags fall under it."""
    tags = normalize_keys(genre_tags)
    hits = {}
    for mood, keywords in MOOD_GENRE_KEYWORDS.items():
        count = sum(1 for tag in tags if any(_keyword_match(tag, kw) for kw in keywords))
        if count:
            hits[mood] = count
    return hits


def match_mood_keys(genre_tags):
    """Mood keys a candidate fits, in mood table order."""
    return list(mood_keyword_hits(genre_tags).keys())


def _flag(state, name):
    return bool(state.get(name)) if state else False


def _popularity(game):
    try:
        hint = float(game.get("score_hint") or 0)
    except (TypeError, ValueError):
        return 0.0
    if hint != hint:  # NaN
        return 0.0
    return float(np.clip(hint / POPULARITY_SCALE, 0.0, 1.0))


def is_excluded(state):
    """Shelf state alone gates a candidate out of every ranking."""
    return _flag(state, "dont_recommend") or _flag(state, "played") or _flag(state, "disliked")


def score_game(game, history, state, mood_tags, affinity, mode=PERSONALIZED, now=None):
    """Score one candidate, or return None when its shelf state excludes it.

    Every term is added to a running total and recorded as a reason string
    carrying its signed magnitude, so the final score can be audited from the
    reasons alone.
    """
    if is_excluded(state):
        return None

    weights = mode_weights(mode)
    history = history or []
    affinity = affinity or {}
    now = parse_timestamp(now) or pd.Timestamp.now(tz="UTC")

    total = 0.0
    reasons = []

    def add(label, value):
        nonlocal total
        if not value:
            return
        total += value
        reasons.append(f"{label} {value:+.1f}")

    add("popularity", _popularity(game) * weights["popularity"])

    if _flag(state, "liked"):
        add("liked on your shelf", weights["shelf_liked"])

    like_count = count_actions(history, LIKE_ACTIONS)
    if like_count:
        add(f"liked {like_count}x", min(LIKE_CAP, like_count) * weights["like"])

    played_count = count_actions(history, PLAYED_ACTIONS)
    if played_count:
        add(f"played {played_count}x", min(PLAYED_CAP, played_count) * weights["played"])

    not_now_count = count_actions(history, NOT_NOW_ACTIONS)
    if not_now_count:
        add(f"not now {not_now_count}x", min(NOT_NOW_CAP, not_now_count) * weights["not_now"])

    shown_count = count_actions(history, SHOWN_ACTIONS)
    if shown_count:
        add(f"shown {shown_count}x", min(SHOWN_CAP, shown_count) * weights["shown"])

    last_shown = latest_shown_at(history)
    if last_shown is not None and (now - last_shown) <= pd.Timedelta(hours=SHOWN_COOLDOWN_HOURS):
        add(f"shown in the last {SHOWN_COOLDOWN_HOURS}h", weights["recent_shown"])

    hits = mood_keyword_hits(game.get("genre_tags"))
    mood_keys = list(hits.keys())
    selected = [tag for tag in normalize_keys(mood_tags) if tag in hits]
    # One match per (selected mood, matching genre tag) pair
    overlap = sum(hits[tag] for tag in selected)
    if overlap:
        matched = ", ".join(f"{tag} x{hits[tag]}" for tag in selected)
        add(f"mood match ({matched})", overlap * weights["mood_match"])

    if mood_keys:
        carried = sum(affinity.get(key, 0) for key in mood_keys)
        carried = float(np.clip(carried, -MOOD_AFFINITY_CLAMP, MOOD_AFFINITY_CLAMP))
        add("mood history", carried * weights["mood_affinity"])

    if not history:
        add("new to you", weights["novelty"])

    return {
        "game": game,
        "key": game_key(game),
        "score": total,
        "reasons": reasons,
        "mood_keys": mood_keys,
    }
