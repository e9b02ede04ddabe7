from functools import wraps

from flask import g, jsonify, request
from flask_login import current_user

from ..extensions import db
from ..services.errors import AuthorizationError, NotFoundError, ValidationError
from .error_messages import ErrorMessages as EM


def _error_response(exc):
    return jsonify(exc.to_dict()), exc.status_code


def requested_business_id():
    """businessId from the JSON body, the multipart form, or the query string."""
    if request.is_json:
        payload = request.get_json(silent=True)
        if isinstance(payload, dict) and payload.get("businessId") is not None:
            return payload.get("businessId")
    if request.form.get("businessId"):
        return request.form.get("businessId")
    return request.args.get("businessId")


def require_business_access(f):
    """
    Decorator requiring a logged-in, active member of the requested business.

    Sets ``g.business`` and ``g.membership`` for the view. Responds 401 when
    nobody is logged in, 400 without a businessId, 404 for an unknown or
    inactive business and 403 for non-members.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return _error_response(AuthorizationError(EM.AUTH_REQUIRED, status_code=401))

        business_id = requested_business_id()
        if not isinstance(business_id, str) or not business_id.strip():
            return _error_response(ValidationError(EM.BUSINESS_ID_INVALID))

        from ..models import Business

        business = db.session.get(Business, business_id.strip())
        if business is None or not business.is_active:
            return _error_response(NotFoundError(EM.BUSINESS_NOT_FOUND))

        membership = current_user.membership_for(business.id)
        if membership is None or not membership.is_active:
            return _error_response(AuthorizationError(EM.BUSINESS_ACCESS_DENIED))

        g.business = business
        g.membership = membership
        return f(*args, **kwargs)

    return decorated_function
