import logging

from flask import Blueprint, current_app, g, jsonify, request
from flask_login import current_user

from ...extensions import limiter
from ...services.bulk_inward import BulkInwardService
from ...services.errors import InventoryError
from ...services.inventory_adjustment import adjust_inventory
from ...services.placement_service import list_product_logs, list_product_placements
from ...utils.error_messages import ErrorMessages as EM
from ...utils.permissions import require_business_access

logger = logging.getLogger(__name__)

inventory_api_bp = Blueprint('inventory_api', __name__, url_prefix='/inventory')

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def _error_response(exc: InventoryError):
    return jsonify(exc.to_dict()), exc.status_code


def _unexpected_error():
    return jsonify({'error': 'Internal Server Error', 'message': EM.UNEXPECTED_ERROR}), 500


def _bulk_inward_limit():
    return current_app.config.get('BULK_INWARD_RATE_LIMIT', '30 per minute')


def _required_sku():
    sku = (request.args.get('sku') or '').strip()
    if not sku:
        return None, (jsonify({'error': 'Validation Error', 'message': EM.SKU_INVALID}), 400)
    return sku, None


@inventory_api_bp.route('/adjust', methods=['POST'])
@require_business_access
def adjust():
    """Manual inward or deduction against one SKU, optionally tied to a placement."""
    data = request.get_json(silent=True) or {}
    try:
        result = adjust_inventory(
            g.business.id,
            data.get('sku'),
            data.get('type'),
            data.get('amount'),
            actor=current_user._get_current_object(),
            placement=data.get('placement'),
            user_agent=request.headers.get('User-Agent'),
        )
    except InventoryError as exc:
        logger.info(f"Inventory adjustment rejected ({exc.status_code}): {exc.message}")
        return _error_response(exc)
    except Exception:
        logger.exception("Inventory adjust API error")
        return _unexpected_error()

    return jsonify(result.to_dict()), 200


@inventory_api_bp.route('/bulk-inward', methods=['POST'])
@limiter.limit(_bulk_inward_limit)
@require_business_access
def bulk_inward():
    """Multipart upload (``file``, ``businessId``, optional ``dryRun``) placing stock row by row."""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'error': 'Validation Error', 'message': EM.FILE_REQUIRED}), 400

    dry_run = (request.form.get('dryRun') or '').strip().lower() in _TRUE_VALUES
    try:
        service = BulkInwardService(
            g.business.id,
            current_user._get_current_object(),
            user_agent=request.headers.get('User-Agent'),
        )
        summary = service.import_file(upload.filename, upload.stream, dry_run=dry_run)
    except InventoryError as exc:
        logger.info(f"Bulk inward rejected ({exc.status_code}): {exc.message}")
        return _error_response(exc)
    except Exception:
        logger.exception("Bulk inward API error")
        return _unexpected_error()

    # an aborted import still answers 200: earlier chunks were committed
    return jsonify(summary.to_dict()), 200


@inventory_api_bp.route('/placements', methods=['GET'])
@require_business_access
def placements():
    sku, error = _required_sku()
    if error:
        return error
    rows = list_product_placements(g.business.id, sku)
    return jsonify({'placements': [row.to_dict() for row in rows]})


@inventory_api_bp.route('/logs', methods=['GET'])
@require_business_access
def logs():
    sku, error = _required_sku()
    if error:
        return error

    raw_limit = request.args.get('limit', '50')
    try:
        limit = int(raw_limit)
    except ValueError:
        limit = 0
    if limit <= 0:
        return jsonify({'error': 'Validation Error', 'message': EM.LIMIT_INVALID}), 400

    try:
        entries = list_product_logs(g.business.id, sku, limit=limit)
    except InventoryError as exc:
        return _error_response(exc)
    return jsonify({'logs': [entry.to_dict() for entry in entries]})
