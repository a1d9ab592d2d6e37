"""Data-access helpers for per-game shelf state (liked / played / disliked / don't recommend)."""

from app.db import get_db

_STATE_COLUMNS = """
    id, user_id, external_source, external_game_id, game_title_snapshot,
    liked, played, disliked, dont_recommend, updated_at
"""


def _to_dict(row):
    item = dict(row)
    for flag in ("liked", "played", "disliked", "dont_recommend"):
        item[flag] = bool(item.get(flag))
    return item


def list_by_user(user_id, sort="recent"):
    # Keep sorting controlled with a fixed SQL fragment (no user-provided SQL).
    order_sql = "ORDER BY updated_at DESC, id DESC"
    if sort == "alpha":
        order_sql = "ORDER BY game_title_snapshot COLLATE NOCASE ASC"
    db = get_db()
    cur = db.execute(
        f"SELECT {_STATE_COLUMNS} FROM user_game_states WHERE user_id = ? {order_sql}",
        (user_id,),
    )
    return [_to_dict(row) for row in cur.fetchall()]


def get(user_id, external_source, external_game_id):
    db = get_db()
    row = db.execute(
        f"""
        SELECT {_STATE_COLUMNS} FROM user_game_states
        WHERE user_id = ? AND external_source = ? AND external_game_id = ?
        """,
        (user_id, external_source, external_game_id),
    ).fetchone()
    return _to_dict(row) if row else None


def upsert(user_id, external_source, external_game_id, title, liked, played, disliked, dont_recommend, updated_at):
    # One row per user/game; the latest write wins.
    db = get_db()
    db.execute(
        """
        INSERT INTO user_game_states (
            user_id, external_source, external_game_id, game_title_snapshot,
            liked, played, disliked, dont_recommend, updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (user_id, external_source, external_game_id) DO UPDATE SET
            game_title_snapshot = COALESCE(excluded.game_title_snapshot, game_title_snapshot),
            liked = excluded.liked,
            played = excluded.played,
            disliked = excluded.disliked,
            dont_recommend = excluded.dont_recommend,
            updated_at = excluded.updated_at
        """,
        (
            user_id,
            external_source,
            external_game_id,
            title,
            int(liked),
            int(played),
            int(disliked),
            int(dont_recommend),
            updated_at,
        ),
    )
    db.commit()


def delete(user_id, external_source, external_game_id):
    db = get_db()
    cur = db.execute(
        "DELETE FROM user_game_states WHERE user_id = ? AND external_source = ? AND external_game_id = ?",
        (user_id, external_source, external_game_id),
    )
    db.commit()
    return cur.rowcount
