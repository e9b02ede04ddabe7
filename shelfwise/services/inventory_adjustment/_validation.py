from dataclasses import dataclass

from ...models import MAX_STOCK_QUANTITY
from ...utils.error_messages import ErrorMessages as EM
from ..errors import ValidationError
from ._counters import COUNTER_FIELD_FOR_TYPE

ADJUSTMENT_TYPES = tuple(COUNTER_FIELD_FOR_TYPE)


@dataclass(frozen=True)
class PlacementRequest:
    """Optional placement attached to a manual adjustment.

    Inward adjustments name a target shelf (and optionally the rack, zone and
    warehouse the caller believes it lives in). Deductions name an existing
    placement.
    """
    shelf_code: str | None = None
    rack_code: str | None = None
    zone_code: str | None = None
    warehouse_code: str | None = None
    placement_id: str | None = None


def _non_empty_string(value):
    return isinstance(value, str) and bool(value.strip())


def validate_amount(amount):
    # bool is an int subclass; "5" and 5.0 are rejected rather than coerced
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError(EM.AMOUNT_INVALID)
    if amount > MAX_STOCK_QUANTITY:
        raise ValidationError(EM.AMOUNT_TOO_LARGE.format(limit=MAX_STOCK_QUANTITY))
    return amount


def _code(payload, *keys):
    for key in keys:
        value = payload.get(key)
        if _non_empty_string(value):
            return value.strip().upper()
    return None


def parse_placement(change_type, placement):
    if placement is None:
        return None
    if not isinstance(placement, dict):
        raise ValidationError(EM.PLACEMENT_INVALID)

    if change_type == 'inward':
        shelf_code = _code(placement, 'shelfCode', 'shelfId')
        if not shelf_code:
            raise ValidationError(EM.PLACEMENT_SHELF_REQUIRED)
        return PlacementRequest(
            shelf_code=shelf_code,
            rack_code=_code(placement, 'rackCode', 'rackId'),
            zone_code=_code(placement, 'zoneCode', 'zoneId'),
            warehouse_code=_code(placement, 'warehouseCode', 'warehouseId'),
        )

    placement_id = placement.get('placementId')
    if not _non_empty_string(placement_id):
        raise ValidationError(EM.PLACEMENT_ID_REQUIRED)
    return PlacementRequest(placement_id=placement_id.strip())


def validate_adjustment_request(business_id, sku, change_type, amount, placement=None):
    """Check the request shape and return the parsed placement, if any."""
    if not _non_empty_string(business_id):
        raise ValidationError(EM.BUSINESS_ID_INVALID)
    if not _non_empty_string(sku):
        raise ValidationError(EM.SKU_INVALID)
    if change_type not in ADJUSTMENT_TYPES:
        raise ValidationError(EM.TYPE_INVALID)
    validate_amount(amount)
    return parse_placement(change_type, placement)


def check_deduction_ceiling(snapshot, amount):
    """Reject a deduction that would take physical stock below zero."""
    projected = snapshot.incremented('deduction', amount)
    if projected.physical_stock < 0:
        stock = snapshot.physical_stock
        raise ValidationError(
            EM.DEDUCTION_EXCEEDS_STOCK.format(amount=amount, stock=stock, ceiling=max(stock, 0))
        )
