from flask import Blueprint

api_bp = Blueprint('api', __name__, url_prefix='/api')

# Register sub-blueprints
from .inventory_routes import inventory_api_bp  # noqa: E402

api_bp.register_blueprint(inventory_api_bp)
