"""Flask application factory."""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from app.config import Config
from services.reference_data import load_reference_data


def configure_logging(app, level: str):
    """Apply the configured level to the app and service loggers."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)
    logging.getLogger("services").setLevel(level)


def create_app(config: Optional[Config] = None, reference_data=None):
    """Create and configure the Flask application.

    Args:
        config: Settings to use; read from the environment when omitted.
        reference_data: Pre-built classification tables; loaded from
            ``REFERENCE_DATA_DIR`` (or ``backend/config``) when omitted.
    """
    config = config or Config()
    app = Flask(__name__)
    configure_logging(app, config.log_level)

    # Enable CORS for frontend
    CORS(app, resources={
        r"/api/*": {
            "origins": config.cors_origins,
            "methods": ["GET", "OPTIONS"],
            "allow_headers": [
                "Content-Type",
                "X-Jira-Token", "X-Jira-Email", "X-Jira-Server",
            ]
        }
    })

    # Classification tables are immutable and shared by every request
    if reference_data is None:
        reference_data = load_reference_data(config.reference_data_dir)
    app.config["SETTINGS"] = config
    app.config["REFERENCE_DATA"] = reference_data

    if config.has_service_account:
        app.logger.info(f"Using Jira service account for {config.jira_server}")
    else:
        app.logger.info("No Jira service account configured, credentials required in headers")

    # Register blueprints
    from app.api import classification, debug
    app.register_blueprint(classification.bp)
    app.register_blueprint(debug.bp)

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"status": "ok"}

    return app
