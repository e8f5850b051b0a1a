"""
Application factory for the Employee Management API.

Usage::

    from app import create_app
    app = create_app()           # Uses FLASK_ENV to pick config.
    app = create_app("testing")  # Explicit config for tests.
"""

import logging
import os
import time

from flask import Flask, g, request
from werkzeug.exceptions import HTTPException

from .config import config_by_name
from .errors import ServiceError
from .extensions import db, migrate
from .responses import error
from .validation import RecordIdConverter

logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None, config_overrides: dict | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name:      One of 'development', 'testing', or 'production'.
                          Defaults to the FLASK_ENV environment variable,
                          falling back to 'development'.
        config_overrides: Optional values applied after the config class
                          (used by tests for per-run paths).

    Returns:
        A fully configured Flask application instance.
    """
    # Resolve the configuration class.
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")
    config_class = config_by_name.get(config_name)
    if config_class is None:
        raise ValueError(
            f"Unknown config '{config_name}'. "
            f"Valid options: {list(config_by_name.keys())}"
        )

    app = Flask(__name__)
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    # Keep key order from to_dict() in JSON responses.
    app.json.sort_keys = False

    # Refuse to run production with missing secrets.
    if config_name == "production":
        config_class.validate_production_secrets(app.config)

    # -- Configure logging -------------------------------------------------
    _configure_logging(app)

    # -- Initialize extensions ---------------------------------------------
    _register_extensions(app)

    # -- URL converters (before any blueprint rules are added) -------------
    app.url_map.converters["id"] = RecordIdConverter

    # -- Register blueprints -----------------------------------------------
    _register_blueprints(app)

    # -- Register error handlers -------------------------------------------
    _register_error_handlers(app)

    # -- Register request logging ------------------------------------------
    _register_request_logging(app)

    # -- Register custom CLI commands --------------------------------------
    _register_cli_commands(app)

    return app


def _register_extensions(app: Flask) -> None:
    """Bind all Flask extensions to the application instance."""
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so metadata is complete for create_all and Alembic.
    from . import models  # noqa: F401  pylint: disable=import-outside-toplevel

    if app.debug and not app.testing:
        with app.app_context():
            db.create_all()


def _register_blueprints(app: Flask) -> None:
    """
    Import and register each blueprint with its URL prefix.

    Blueprints are imported inside this function to avoid circular
    imports; models and services can safely import ``db`` from
    extensions at module level.
    """
    # pylint: disable=import-outside-toplevel

    # Main blueprint: health check at /health.
    from .blueprints.main import bp as main_bp

    app.register_blueprint(main_bp)

    # Departments: CRUD.
    from .blueprints.departments import bp as departments_bp

    app.register_blueprint(departments_bp, url_prefix="/api/departments")

    # Employees: CRUD, statistics, export.
    from .blueprints.employees import bp as employees_bp

    app.register_blueprint(employees_bp, url_prefix="/api/employees")


def _register_error_handlers(app: Flask) -> None:
    """Translate service errors and HTTP errors into the JSON envelope."""

    @app.errorhandler(ServiceError)
    def service_error(exc: ServiceError):
        """Typed errors raised by validation and the service layer."""
        if exc.status_code >= 500:
            db.session.rollback()
            logger.error("Service error on %s %s: %s", request.method, request.path, exc.message)
        else:
            logger.warning(
                "%s on %s %s: %s",
                type(exc).__name__,
                request.method,
                request.path,
                exc.message,
            )
        return error(exc.message, exc.status_code, exc.errors)

    @app.errorhandler(404)
    def not_found(exc):  # pylint: disable=unused-argument
        """Handle 404 Not Found for unknown routes."""
        logger.warning("Route not found: %s %s", request.method, request.path)
        return error("Route not found", 404)

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException):
        """Any other werkzeug HTTP error (405, 413, ...)."""
        return error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def internal_error(exc: Exception):
        """Handle anything unclassified as a 500."""
        db.session.rollback()
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        message = "Something went wrong" if not (app.debug or app.testing) else str(exc)
        return error(message, 500)


def _register_request_logging(app: Flask) -> None:
    """Log each request and its response status with timing."""

    @app.before_request
    def log_request():
        g.request_started = time.perf_counter()
        logger.info(
            "Incoming request %s %s from %s",
            request.method,
            request.path,
            request.remote_addr,
        )

    @app.after_request
    def log_response(response):
        started = g.get("request_started")
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info(
            "%s %s %d %.1f ms",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def _register_cli_commands(app: Flask) -> None:
    """Register custom Flask CLI commands (e.g., flask db-check)."""
    # pylint: disable=import-outside-toplevel
    from .cli import register_commands
    from .seed_demo_data import register_seed_commands

    register_commands(app)
    register_seed_commands(app)


def _configure_logging(app: Flask) -> None:
    """
    Set the root log level from ``LOG_LEVEL``.

    SQLAlchemy's engine logger is quieted in debug mode because
    ``SQLALCHEMY_ECHO`` already prints statements.
    """
    log_level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # Quiet down noisy libraries in development.
    if app.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
