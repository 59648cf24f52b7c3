import logging
import os

from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
cache = Cache()
migrate = Migrate()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    # We want the leftmost (original client) IP
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


# Storage backend and default limits come from RATELIMIT_* config keys
limiter = Limiter(key_func=get_real_ip)


def create_app(config_name=None):
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())
    app.json.sort_keys = False

    # Initialize extensions
    db.init_app(app)
    cache.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Import and register blueprints
    from app.routes.api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    from app.routes.admin import bp as admin_bp

    app.register_blueprint(admin_bp, url_prefix="/admin")

    # Register error handlers
    register_error_handlers(app)

    # Setup logging
    from app.utils.logging_config import setup_logging

    setup_logging(app)

    # Show configuration warnings
    show_config_warnings(app, config_name)

    # Create database tables
    with app.app_context():
        db.create_all()

    return app


def show_config_warnings(app, config_name):
    """Log configuration warnings and status"""
    import warnings

    logger.info(f"NFL Playoff Picks starting with '{config_name}' configuration")

    if config_name == "production" and app.config.get("DEBUG"):
        warnings.warn("DEBUG mode is enabled in production!", UserWarning)

    if not app.config.get("ADMIN_PASSWORD"):
        logger.warning("ADMIN_PASSWORD is not set - admin login is disabled")

    tiebreak_round = app.config.get("TIEBREAK_ROUND_NAME")
    if tiebreak_round not in app.config.get("ROUND_ORDER", []):
        logger.warning(
            f"Tie-break round '{tiebreak_round}' is not in ROUND_ORDER; "
            "it will be listed after the known rounds"
        )

    if app.config.get("CACHE_TYPE") == "SimpleCache" and config_name == "production":
        logger.warning(
            "SimpleCache is per-process - leaderboard caches are not shared between workers"
        )
    if (
        app.config.get("RATELIMIT_ENABLED")
        and app.config.get("RATELIMIT_STORAGE_URI", "").startswith("memory")
        and config_name == "production"
    ):
        logger.warning("Rate limits use in-memory storage and are tracked per worker")

    db_url = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    backend = db_url.split("://")[0] if "://" in db_url else "unknown"
    if backend.startswith("sqlite"):
        where = "in-memory" if ":memory:" in db_url else "app.db file"
        logger.info(f"Using SQLite database ({where})")
    else:
        # Host and database name only, never credentials
        location = db_url.rsplit("@", 1)[-1].split("?")[0]
        logger.info(f"Using {backend} database at {location}")


def register_error_handlers(app):
    """Register global error handlers"""

    @app.after_request
    def after_request(response):
        # Add security headers to all responses
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store"

        # Add Strict-Transport-Security in production
        if not app.config.get("DEBUG") and not app.config.get("TESTING"):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {str(error)} - Path: {request.path} - Method: {request.method}"
        )
        return jsonify({"error": "Bad request"}), 400

    @app.errorhandler(401)
    def unauthorized_error(error):
        return jsonify({"error": "Authentication required"}), 401

    @app.errorhandler(403)
    def forbidden_error(error):
        return jsonify({"error": "Access forbidden"}), 403

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return jsonify({"error": "Too many requests"}), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(503)
    def service_unavailable_error(error):
        return jsonify({"error": "Service unavailable"}), 503


from app import models  # noqa: F401, E402 - imported for model registration
