from __future__ import annotations

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager, current_user
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

__all__ = [
    "db",
    "migrate",
    "limiter",
    "login_manager",
]

db = SQLAlchemy()
migrate = Migrate(compare_type=True, render_as_batch=True)


def _limiter_key_func():
    """Use per-user keys for authenticated traffic; fall back to IP address."""
    if current_user and current_user.is_authenticated:
        user_id = current_user.get_id()
        if user_id:
            return f"user:{user_id}"
    return get_remote_address()


# Default limits come from RATELIMIT_DEFAULT in the app config.
limiter = Limiter(key_func=_limiter_key_func)

login_manager = LoginManager()
