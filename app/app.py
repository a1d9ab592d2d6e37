import logging
import os

from flask import Flask, jsonify

from app.db import close_db, init_db
from app.logging_setup import setup_logging
from app.routes.api import api_bp
from app.services.catalog import CatalogClient
from utils.cache import TTLCache

logger = logging.getLogger(__name__)


def _default_db_path():
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    return os.path.join(root, "data", "db", "gameshelf.db")


def create_app(catalog=None):
    setup_logging(os.environ.get("LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET_KEY", "dev-change-me")
    app.config["DATABASE"] = os.environ.get("GAMESHELF_DB_PATH", _default_db_path())
    app.config["RAWG_API_KEY"] = os.environ.get("RAWG_API_KEY", "")
    app.config["OPENAI_API_KEY"] = os.environ.get("OPENAI_API_KEY", "")
    app.config["OPENAI_MODEL"] = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    app.config["OPENAI_BASE_URL"] = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
    app.config["CATALOG_CACHE_TTL_SEC"] = int(os.environ.get("CATALOG_CACHE_TTL_SEC", "600"))

    init_db(app.config["DATABASE"])
    app.teardown_appcontext(close_db)
    app.register_blueprint(api_bp)

    if catalog is None:
        catalog = CatalogClient(app.config["RAWG_API_KEY"], TTLCache(app.config["CATALOG_CACHE_TTL_SEC"]))
    app.extensions["gameshelf.catalog"] = catalog

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    logger.info("game shelf app ready (db=%s)", app.config["DATABASE"])
    return app
