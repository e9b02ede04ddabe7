"""Global resilience and error-handler registration.

Synopsis:
Registers teardown and error handlers for database rollback safety, a 503
fallback when the database is unreachable, and JSON bodies for the HTTP
errors Flask and Flask-Limiter raise before a view runs.
"""

from __future__ import annotations

import logging

from flask import jsonify
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from werkzeug.exceptions import RequestEntityTooLarge, TooManyRequests

from .extensions import db
from .utils.error_messages import ErrorMessages as EM

logger = logging.getLogger(__name__)


def register_resilience_handlers(app) -> None:
    """Install global DB rollback and JSON error handlers."""

    @app.teardown_request
    def _rollback_on_error(exc):
        if exc is None:
            return
        try:
            db.session.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback during request teardown failed", exc_info=True)

    @app.errorhandler(OperationalError)
    @app.errorhandler(DBAPIError)
    def _db_error_handler(error):
        logger.error("Database unavailable: %s", error)
        try:
            db.session.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback after database error failed", exc_info=True)
        return jsonify({"error": "Service Unavailable", "message": EM.SERVICE_UNAVAILABLE}), 503

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large_handler(_error):
        return jsonify({"error": "Payload Too Large", "message": EM.FILE_TOO_LARGE}), 413

    @app.errorhandler(TooManyRequests)
    def _rate_limited_handler(error):
        return jsonify({"error": "Too Many Requests", "message": EM.RATE_LIMITED.format(limit=error.description)}), 429
