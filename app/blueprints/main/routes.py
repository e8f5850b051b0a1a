"""
Routes for the main blueprint: health check.
"""

import logging
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.blueprints.main import bp
from app.extensions import db
from app.responses import error, success

logger = logging.getLogger(__name__)


@bp.route("/health")
def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 if the app is running and can reach the database,
    503 otherwise.
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Health check failed: %s", exc)
        return error("Employee Management System API cannot reach the database", 503)

    return success(
        {
            "status": "healthy",
            "database": "connected",
            "timestamp": timestamp,
            "version": current_app.config["APP_VERSION"],
        },
        message="Employee Management System API is running",
    )
