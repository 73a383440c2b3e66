"""Application factory for the Otobook RPA backend."""
from __future__ import annotations

import logging
import time

from flask import Flask
from sqlalchemy.exc import OperationalError

from .config import Config
from .extensions import cors, db, limiter


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application instance."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    log_level = str(app.config.get("LOG_LEVEL") or "INFO").upper()
    app.logger.setLevel(log_level)
    logging.getLogger("otobook").setLevel(log_level)
    logging.getLogger("backend.otobook").setLevel(log_level)

    db.init_app(app)

    if cors is not None:
        allowed_origins = [
            origin.strip()
            for origin in (app.config.get("CORS_ALLOWED_ORIGINS") or "").split(",")
            if origin.strip()
        ]
        cors.init_app(
            app,
            resources={r"/api/*": {"origins": allowed_origins}},
            allow_headers=["Content-Type", "Authorization"],
        )

    limiter.init_app(app)

    from .api.catalog import bp as catalog_bp
    from .api.health import bp as health_bp
    from .api.history import bp as history_bp
    from .api.workflows import bp as workflows_bp

    demo_bp = None
    if app.config.get("ENABLE_DEMO_API", True):
        from .api.demo import bp as demo_bp

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(catalog_bp, url_prefix="/api")
    app.register_blueprint(workflows_bp, url_prefix="/api")
    app.register_blueprint(history_bp, url_prefix="/api")
    if demo_bp is not None:
        app.register_blueprint(demo_bp, url_prefix="/api")

    with app.app_context():
        # Import models to ensure they are registered with SQLAlchemy before creating tables.
        from .models import runs, workflow  # noqa: F401

        _initialize_database(app)

    from .rpa.service import get_service

    get_service(app)

    return app


def _initialize_database(app: Flask) -> None:
    """Initialize the database with retry logic to handle delayed availability."""

    max_retries = int(app.config.get("DB_INIT_MAX_RETRIES", 30))
    retry_delay = float(app.config.get("DB_INIT_RETRY_DELAY", 2))

    for attempt in range(1, max_retries + 1):
        try:
            db.create_all()
            return
        except OperationalError as exc:
            if attempt >= max_retries:
                app.logger.exception("Database initialization failed after %s attempts.", attempt)
                raise

            app.logger.warning(
                "Database initialization attempt %s/%s failed: %s", attempt, max_retries, exc
            )
            time.sleep(retry_delay)
