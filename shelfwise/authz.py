from __future__ import annotations

import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db, login_manager
from .utils.error_messages import ErrorMessages as EM

logger = logging.getLogger(__name__)


def configure_login_manager(app):
    """Attach Flask-Login handlers. This service only speaks JSON, so no login redirect."""
    login_manager.init_app(app)

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({"error": "Unauthorized", "message": EM.AUTH_REQUIRED}), 401

    @login_manager.user_loader
    def load_user(user_id: str):
        from .models import User

        try:
            user = db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None
        except SQLAlchemyError:
            logger.exception("User lookup failed during session load")
            db.session.rollback()
            return None

        if not user or not user.is_active:
            return None
        return user
