"""Flask application factory for the blur64 backend."""

from __future__ import annotations

import logging
import sys

from flask import Flask
from flask_cors import CORS

from .config import Config
from .routes import placeholder_bp
from .services import PlaceholderService

logger = logging.getLogger(__name__)


def create_app(config: Config | None = None, service: PlaceholderService | None = None) -> Flask:
    """Create and configure the Flask application."""
    if config is None:
        config = Config.load()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes
    app.config["placeholder_service"] = service or PlaceholderService(config)

    app.register_blueprint(placeholder_bp)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("blur64 backend initialized")
    return app


def main() -> None:
    """Entry point for running the development server."""
    app = create_app()
    app.run(host="0.0.0.0", port=5001, debug=True, use_reloader=False)


if __name__ == "__main__":
    main()
