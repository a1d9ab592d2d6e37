"""Local entrypoint for the game shelf API."""

import os

from app.app import create_app
from utils.parsing import parse_bool


def run():
    app = create_app()
    # Debug stays off unless FLASK_DEBUG asks for it
    app.run(
        host=os.environ.get("GAMESHELF_HOST", "127.0.0.1"),
        port=int(os.environ.get("GAMESHELF_PORT", "5000")),
        debug=parse_bool(os.environ.get("FLASK_DEBUG"), default=False),
    )


if __name__ == "__main__":
    run()
