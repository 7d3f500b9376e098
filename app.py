"""Flask application entry point."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from flask import Flask

load_dotenv()

from api.routes import api_bp


def create_app(config: dict | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Optional config dict to override defaults.

    Returns:
        Configured Flask app instance.
    """
    app = Flask(__name__)

    # Defaults
    app.config["FIELD_TYPES_PATH"] = os.environ.get("FIELD_TYPES_PATH") or None

    # Apply overrides
    if config:
        app.config.update(config)

    # Register blueprints
    app.register_blueprint(api_bp)

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(debug=True, port=5010)
