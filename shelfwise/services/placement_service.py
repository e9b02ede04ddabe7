"""
Placement ledger operations.

A placement records how many units of one SKU sit on one shelf. Quantities
only move through single-statement SQL increments; rows are never deleted,
a full deduction leaves them at zero.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from ..models import Placement, Product, ProductLog, Rack, Shelf, Warehouse, Zone, db
from ..utils.error_messages import ErrorMessages as EM
from ..utils.timezone_utils import TimezoneUtils
from .errors import NotFoundError, PersistenceError, ValidationError
from .location_hierarchy import validate_location_chain

logger = logging.getLogger(__name__)

LOCATION_MODELS = (
    ('Warehouse', Warehouse),
    ('Zone', Zone),
    ('Rack', Rack),
    ('Shelf', Shelf),
)

MAX_LOG_PAGE = 200

_UPSERT_INSERTS = {
    'sqlite': sqlite_insert,
    'postgresql': postgresql_insert,
}


def placement_key(sku: str, shelf_code: str) -> str:
    return f"{sku}_{shelf_code}"


@dataclass(frozen=True)
class ShelfTarget:
    """Codes and display names of a resolved shelf and its ancestors.

    Plain values rather than model instances, so a target staged in one
    transaction can still be written after the session expired its rows.
    """
    shelf_code: str
    shelf_name: str
    rack_code: str
    rack_name: str
    zone_code: str
    zone_name: str
    warehouse_code: str
    warehouse_name: str

    @classmethod
    def from_records(cls, shelf, rack, zone, warehouse):
        return cls(
            shelf_code=shelf.code,
            shelf_name=shelf.name,
            rack_code=rack.code,
            rack_name=rack.name,
            zone_code=zone.code,
            zone_name=zone.name,
            warehouse_code=warehouse.code,
            warehouse_name=warehouse.name,
        )

    @property
    def location(self):
        return f"{self.warehouse_name} > {self.zone_name} > {self.rack_name} > {self.shelf_name}"

    def snapshot(self, placement_id):
        return {
            'placementId': placement_id,
            'shelfId': self.shelf_code,
            'shelfName': self.shelf_name,
            'rackId': self.rack_code,
            'rackName': self.rack_name,
            'zoneId': self.zone_code,
            'zoneName': self.zone_name,
            'warehouseId': self.warehouse_code,
            'warehouseName': self.warehouse_name,
        }


def load_locations(model, business_id, codes):
    """Map code -> active row for ``codes`` in a single IN query."""
    codes = sorted({code for code in codes if code})
    if not codes:
        return {}
    rows = model.query.filter(
        model.business_id == business_id,
        model.code.in_(codes),
        model.is_deleted.is_(False),
    ).all()
    return {row.code: row for row in rows}


def _require_location(kind, model, business_id, code):
    row = load_locations(model, business_id, [code]).get(code)
    if row is None:
        raise NotFoundError(EM.LOCATION_NOT_FOUND.format(kind=kind, code=code))
    return row


def resolve_shelf_target(business_id, shelf_code, *, rack_code=None, zone_code=None, warehouse_code=None):
    """Resolve a shelf and its ancestors, then check the chain agrees.

    Ancestor codes the caller does not supply default to the ones the shelf
    declares, which still lets the rack and zone rows disagree with them.
    """
    shelf = _require_location('Shelf', Shelf, business_id, shelf_code)
    rack = _require_location('Rack', Rack, business_id, rack_code or shelf.rack_id)
    zone = _require_location('Zone', Zone, business_id, zone_code or shelf.zone_id)
    warehouse = _require_location('Warehouse', Warehouse, business_id, warehouse_code or shelf.warehouse_id)

    check = validate_location_chain(shelf, rack, zone, warehouse)
    if not check:
        logger.warning(f"Shelf path mismatch for {business_id}/{shelf_code}: {check.describe_mismatch()}")
        raise ValidationError(EM.SHELF_PATH_MISMATCH.format(details=check.describe_mismatch()))
    return ShelfTarget.from_records(shelf, rack, zone, warehouse)


def get_placement(business_id, placement_id):
    return db.session.get(Placement, (business_id, placement_id))


def _increment_placement(session, business_id, placement_id, amount, values) -> bool:
    result = session.execute(
        update(Placement)
        .where(Placement.business_id == business_id, Placement.id == placement_id)
        .values(quantity=Placement.quantity + amount, **values)
        .execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)


def _insert_placement(session, row) -> bool:
    """``INSERT ... ON CONFLICT DO NOTHING``; False when the key already exists."""
    dialect = session.get_bind().dialect.name
    if dialect not in _UPSERT_INSERTS:
        raise RuntimeError(f"Placement upsert is not supported on {dialect}")
    stmt = (
        _UPSERT_INSERTS[dialect](Placement)
        .values(**row)
        .on_conflict_do_nothing(index_elements=['business_id', 'id'])
    )
    return bool(session.execute(stmt).rowcount)


def stage_inward(session, *, business_id, sku, target: ShelfTarget, amount, actor_id,
                 reason='inward_addition', reference=None, now=None):
    """Increment the (sku, shelf) placement, creating it on first use.

    Returns ``(placement_id, created)``. Nothing is committed here; the
    caller owns the transaction.
    """
    now = now or TimezoneUtils.utc_now()
    placement_id = placement_key(sku, target.shelf_code)
    movement = {
        'updated_at': now,
        'updated_by': actor_id,
        'last_movement_reason': reason,
        'last_movement_reference': reference,
    }

    if _increment_placement(session, business_id, placement_id, amount, movement):
        return placement_id, False

    created = _insert_placement(session, {
        'business_id': business_id,
        'id': placement_id,
        'product_id': sku,
        'product_sku': sku,
        'quantity': amount,
        'shelf_id': target.shelf_code,
        'shelf_name': target.shelf_name,
        'rack_id': target.rack_code,
        'rack_name': target.rack_name,
        'zone_id': target.zone_code,
        'zone_name': target.zone_name,
        'warehouse_id': target.warehouse_code,
        'warehouse_name': target.warehouse_name,
        'created_at': now,
        'created_by': actor_id,
        **movement,
    })
    if created:
        return placement_id, True

    # a concurrent transaction created the row after our UPDATE missed it
    logger.info(f"Placement {business_id}/{placement_id} appeared concurrently; incrementing instead")
    if not _increment_placement(session, business_id, placement_id, amount, movement):
        raise PersistenceError(EM.ADJUSTMENT_FAILED)
    return placement_id, False


def deduct_from_placement(session, *, business_id, placement_id, amount, actor_id,
                          reason='manual_deduction', now=None) -> bool:
    """Guarded decrement; returns False when the placement holds fewer than ``amount`` units."""
    now = now or TimezoneUtils.utc_now()
    result = session.execute(
        update(Placement)
        .where(
            Placement.business_id == business_id,
            Placement.id == placement_id,
            Placement.quantity >= amount,
        )
        .values(
            quantity=Placement.quantity - amount,
            updated_at=now,
            updated_by=actor_id,
            last_movement_reason=reason,
        )
        .execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)


def _require_product(business_id, sku):
    product = Product.for_business(business_id).filter_by(sku=sku).first()
    if product is None:
        raise NotFoundError(EM.PRODUCT_NOT_FOUND.format(sku=sku))
    return product


def list_product_placements(business_id, sku):
    """Shelves currently holding stock of ``sku``."""
    return (
        Placement.query
        .filter(
            Placement.business_id == business_id,
            Placement.product_id == sku,
            Placement.quantity > 0,
        )
        .order_by(Placement.warehouse_name, Placement.zone_name, Placement.rack_name, Placement.shelf_name)
        .all()
    )


def list_product_logs(business_id, sku, limit=50):
    product = _require_product(business_id, sku)
    limit = max(1, min(int(limit), MAX_LOG_PAGE))
    return (
        ProductLog.query
        .filter(ProductLog.business_id == business_id, ProductLog.product_id == product.id)
        .order_by(ProductLog.performed_at.desc(), ProductLog.id.desc())
        .limit(limit)
        .all()
    )
