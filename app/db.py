"""Per-request SQLite access for Flask plus schema bootstrap."""

import os
import sqlite3

from flask import current_app, g


def get_db():
    """Return the request's connection, opening it on first use."""
    if "db" not in g:
        db = sqlite3.connect(current_app.config["DATABASE"])
        db.row_factory = sqlite3.Row
        g.db = db
    return g.db


def close_db(_error=None):
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_db(db_path):
    # Interaction log and shelf state are the only tables the recommender reads
    directory = os.path.dirname(os.path.abspath(db_path))
    os.makedirs(directory, exist_ok=True)
    db = sqlite3.connect(db_path)
    try:
        db.execute(
            """
            CREATE TABLE IF NOT EXISTS recommendation_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                external_source TEXT,
                external_game_id TEXT,
                game_title_snapshot TEXT,
                action TEXT NOT NULL,
                context_tags TEXT DEFAULT '',
                why_text TEXT,
                created_at TEXT NOT NULL
            )
            """
        )
        db.execute(
            "CREATE INDEX IF NOT EXISTS idx_recommendation_events_user ON recommendation_events (user_id)"
        )
        db.execute(
            """
            CREATE TABLE IF NOT EXISTS user_game_states (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                external_source TEXT NOT NULL,
                external_game_id TEXT NOT NULL,
                game_title_snapshot TEXT,
                liked INTEGER NOT NULL DEFAULT 0,
                played INTEGER NOT NULL DEFAULT 0,
                disliked INTEGER NOT NULL DEFAULT 0,
                dont_recommend INTEGER NOT NULL DEFAULT 0,
                updated_at TEXT NOT NULL,
                UNIQUE (user_id, external_source, external_game_id)
            )
            """
        )
        db.commit()
    finally:
        db.close()
