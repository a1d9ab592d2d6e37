"""Greedy genre-aware selection of the final short list."""

from collections import Counter

import numpy as np
from sklearn.preprocessing import MultiLabelBinarizer

from recommender.scoring import mode_weights
from utils.parsing import normalize_keys


def _genres(item):
    return normalize_keys((item.get("game") or {}).get("genre_tags"))


def diversify(scored, limit, mode):
    """Pick up to ``limit`` items, penalizing genres already on the list.

    Each round every remaining item gets
        score - repeated_genres * genre_penalty - same_primary * primary_penalty
    and the best one is taken (ties go to the earlier item in score order).
    This is a greedy approximation with no backtracking, so the chosen set is
    not guaranteed to be the most relevant diverse subset.
    """
    if not scored or limit is None or limit <= 0:
        return []

    weights = mode_weights(mode)
    genre_penalty = weights["diversity_genre_penalty"]
    primary_penalty = weights["diversity_primary_genre_penalty"]

    # Stable sort keeps input order among equal scores
    pool = sorted(scored, key=lambda item: item["score"], reverse=True)
    genres = [_genres(item) for item in pool]
    primary = [tags[0] if tags else None for tags in genres]

    if any(genres):
        genre_matrix = MultiLabelBinarizer().fit_transform(genres).astype(np.int64)
    else:
        genre_matrix = np.zeros((len(pool), 0), dtype=np.int64)
    scores = np.array([float(item["score"]) for item in pool], dtype=float)

    selected_genres = np.zeros(genre_matrix.shape[1], dtype=np.int64)
    primary_counts = Counter()
    remaining = list(range(len(pool)))
    picked = []

    while remaining and len(picked) < limit:
        idx = np.array(remaining, dtype=int)
        repeated = genre_matrix[idx] @ (selected_genres > 0).astype(np.int64)
        same_primary = np.array(
            [primary_counts[primary[i]] if primary[i] else 0 for i in remaining], dtype=float
        )
        adjusted = scores[idx] - repeated * genre_penalty - same_primary * primary_penalty
        best = int(np.argmax(adjusted))  # first maximum wins
        chosen = remaining.pop(best)
        picked.append(pool[chosen])
        selected_genres += genre_matrix[chosen]
        if primary[chosen]:
            primary_counts[primary[chosen]] += 1

    return picked
