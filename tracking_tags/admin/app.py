"""Flask application factory for the tracking script API."""

import logging
import os

from flask import Flask

from tracking_tags.admin.blueprints.api import api_bp
from tracking_tags.admin.blueprints.tracking_scripts import tracking_scripts_bp
from tracking_tags.core.config import validate_configuration
from tracking_tags.core.logging_config import setup_structured_logging

logger = logging.getLogger(__name__)


def create_app(config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.logger.setLevel(logging.INFO)
    app.json.sort_keys = False

    # Apply any additional config
    if config:
        app.config.update(config)

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(tracking_scripts_bp, url_prefix="/api/tracking-scripts")

    # Report missing tracking settings at startup rather than mid-generation
    validate_configuration()

    return app


def main():
    setup_structured_logging()
    app = create_app()
    port = int(os.environ.get("PORT", "8080"))
    logger.info(f"Starting tracking script API on port {port}")
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG") == "1")


if __name__ == "__main__":
    main()
