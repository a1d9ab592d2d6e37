"""Data-access helpers for the append-only recommendation event log."""

from app.db import get_db


def insert(user_id, action, external_source=None, external_game_id=None, context_tags="", title=None, why_text=None, created_at=None):
    db = get_db()
    cur = db.execute(
        """
        INSERT INTO recommendation_events (
            user_id, external_source, external_game_id, game_title_snapshot,
            action, context_tags, why_text, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (user_id, external_source, external_game_id, title, action, context_tags or "", why_text, created_at),
    )
    db.commit()
    return cur.lastrowid


def insert_many(rows):
    # rows: (user_id, source, game_id, title, action, context_tags, why_text, created_at)
    if not rows:
        return 0
    db = get_db()
    db.executemany(
        """
        INSERT INTO recommendation_events (
            user_id, external_source, external_game_id, game_title_snapshot,
            action, context_tags, why_text, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        rows,
    )
    db.commit()
    return len(rows)


def list_by_user(user_id):
    # Full log, oldest first so per-game history keeps log order
    db = get_db()
    cur = db.execute(
        """
        SELECT id, user_id, external_source, external_game_id, game_title_snapshot,
               action, context_tags, why_text, created_at
        FROM recommendation_events
        WHERE user_id = ?
        ORDER BY id ASC
        """,
        (user_id,),
    )
    return [dict(row) for row in cur.fetchall()]


def count_by_action(user_id):
    db = get_db()
    rows = db.execute(
        "SELECT action, COUNT(*) AS count FROM recommendation_events WHERE user_id = ? GROUP BY action",
        (user_id,),
    ).fetchall()
    return {row["action"]: row["count"] for row in rows}
