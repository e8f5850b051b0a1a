"""
Application configuration classes.

Each class represents a deployment environment. The factory function
``create_app`` in ``app/__init__.py`` selects the appropriate config
based on the FLASK_ENV environment variable.

The default database is a local SQLite file so the API runs out of the
box.  Point ``DATABASE_URL`` at MySQL, PostgreSQL or SQL Server for a
real deployment; any SQLAlchemy URL works.
"""

import logging
import os

# Startup warnings from validate_production_secrets().
_logger = logging.getLogger(__name__)

# Sentinel for detecting an unset SECRET_KEY in production.
_DEFAULT_SECRET_KEY = "dev-secret-change-me"


class BaseConfig:
    """
    Shared configuration values inherited by all environments.

    Secrets and connection strings are loaded from environment variables
    so they never appear in source control.
    """

    # -- Flask core --------------------------------------------------------
    SECRET_KEY: str = os.environ.get("SECRET_KEY", _DEFAULT_SECRET_KEY)
    APP_VERSION: str = "1.0.0"

    # -- SQLAlchemy --------------------------------------------------------
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(os.getcwd(), "employee_management.db"),
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Echo SQL statements to the log for debugging (override per env).
    SQLALCHEMY_ECHO: bool = False

    # -- Exports -----------------------------------------------------------
    # Generated CSV/PDF/XLSX files land here until the download completes.
    EXPORT_DIR: str = os.environ.get(
        "EXPORT_DIR", os.path.join(os.getcwd(), "exports")
    )

    # -- Pagination --------------------------------------------------------
    # Mirrors the constants in app.pagination; exposed for API clients.
    PAGINATION_DEFAULT_LIMIT: int = 10
    PAGINATION_MAX_LIMIT: int = 100

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def validate_production_secrets(cls, app_config) -> None:
        """
        Refuse to start production with insecure or missing settings.

        A local SQLite fallback and the development secret key are fatal.
        An export directory that cannot be created only logs a warning.

        Raises:
            RuntimeError: Listing every fatal problem found.
        """
        problems = []
        if app_config.get("SECRET_KEY") == _DEFAULT_SECRET_KEY:
            problems.append("SECRET_KEY must be set to a random value")
        if not os.environ.get("DATABASE_URL"):
            problems.append("DATABASE_URL must point at the production database")
        if problems:
            raise RuntimeError(
                "Cannot start in production: " + "; ".join(problems)
            )

        export_dir = app_config.get("EXPORT_DIR", "")
        try:
            os.makedirs(export_dir, exist_ok=True)
        except OSError as exc:
            _logger.warning("EXPORT_DIR %s is not usable: %s", export_dir, exc)

        if str(app_config.get("LOG_LEVEL", "")).upper() == "DEBUG":
            _logger.warning("LOG_LEVEL=DEBUG in production logs request details")


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging, SQL echo enabled."""

    DEBUG: bool = True
    SQLALCHEMY_ECHO: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """
    Testing environment: in-memory SQLite unless TEST_DATABASE_URL is set.

    The test fixtures override ``EXPORT_DIR`` with a temporary directory.
    """

    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL", "sqlite:///:memory:"
    )
    LOG_LEVEL: str = "DEBUG"


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    The application factory calls ``validate_production_secrets()`` at
    startup and refuses to launch if critical values are missing.
    """

    DEBUG: bool = False
    SQLALCHEMY_ECHO: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")


# FLASK_ENV value -> config class.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
