import logging
from dataclasses import dataclass

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from ...models import Placement, Product, db
from ...utils.error_messages import ErrorMessages as EM
from ...utils.timezone_utils import TimezoneUtils
from ..errors import InventoryError, NotFoundError, PersistenceError, ValidationError
from ..placement_service import deduct_from_placement, get_placement, resolve_shelf_target, stage_inward
from ._audit import stage_log_entry
from ._counters import (
    COUNTER_FIELD_FOR_TYPE,
    InventorySnapshot,
    load_product_counters,
    reload_product_counters,
)
from ._validation import check_deduction_ceiling, validate_adjustment_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustmentResult:
    change_type: str
    amount: int
    sku: str
    product_name: str
    field_name: str
    previous: InventorySnapshot
    current: InventorySnapshot
    log_id: str
    placement: dict | None = None

    def to_dict(self):
        verb = 'added' if self.change_type == 'inward' else 'deducted'
        payload = {
            'success': True,
            'message': f'Successfully {verb} {self.amount} units',
            'adjustment': {
                'type': self.change_type,
                'amount': self.amount,
                'sku': self.sku,
                'productName': self.product_name,
            },
            'inventory': {
                'previous': self.previous.summary(self.field_name),
                'current': self.current.summary(self.field_name),
            },
            'logId': self.log_id,
        }
        if self.placement is not None:
            payload['placement'] = self.placement
        return payload


def increment_counter(session, product_id, field_name, amount, *, actor_id, now, guard_physical_stock=False):
    """Single-statement ``counter = counter + amount``; returns rows updated.

    With ``guard_physical_stock`` the UPDATE only applies while physical stock
    still covers ``amount``, so concurrent deductions cannot overdraw.
    """
    column = getattr(Product, field_name)
    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values({field_name: column + amount, 'updated_at': now, 'updated_by': actor_id})
        .execution_options(synchronize_session=False)
    )
    if guard_physical_stock:
        stmt = stmt.where(Product.physical_stock >= amount)
    return session.execute(stmt).rowcount


def _resolve_placement(business_id, sku, change_type, amount, request):
    if request is None:
        return None, None
    if change_type == 'inward':
        target = resolve_shelf_target(
            business_id,
            request.shelf_code,
            rack_code=request.rack_code,
            zone_code=request.zone_code,
            warehouse_code=request.warehouse_code,
        )
        return target, None

    existing = get_placement(business_id, request.placement_id)
    if existing is None:
        raise ValidationError(EM.PLACEMENT_NOT_FOUND.format(placement_id=request.placement_id))
    if existing.product_id != sku:
        raise ValidationError(EM.PLACEMENT_PRODUCT_MISMATCH.format(placement_id=existing.id, sku=sku))
    if existing.quantity < amount:
        raise ValidationError(EM.PLACEMENT_INSUFFICIENT.format(amount=amount, available=existing.quantity))
    return None, existing


def adjust_inventory(business_id, sku, change_type, amount, *, actor, placement=None,
                     user_agent=None, source='manual_adjustment'):
    """
    Canonical entry point for manual inventory adjustments.

    Increments ``inward_addition`` or ``deduction`` for ``sku``, optionally
    moves the matching placement, and appends one ProductLog, all in one
    transaction. Raises an ``InventoryError`` subclass on failure, in which
    case nothing was written.
    """
    request = validate_adjustment_request(business_id, sku, change_type, amount, placement)
    field_name = COUNTER_FIELD_FOR_TYPE[change_type]
    actor_id = str(actor.id) if actor is not None else None

    logger.info(f"INVENTORY ADJUSTMENT: business={business_id}, sku={sku}, type={change_type}, amount={amount}, actor={actor_id}")

    counters = load_product_counters(business_id, sku)
    if counters is None:
        raise NotFoundError(EM.PRODUCT_NOT_FOUND.format(sku=sku))
    if change_type == 'deduction':
        check_deduction_ceiling(counters.snapshot, amount)

    target, existing = _resolve_placement(business_id, sku, change_type, amount, request)

    session = db.session
    now = TimezoneUtils.utc_now()
    try:
        updated = increment_counter(
            session,
            counters.product_id,
            field_name,
            amount,
            actor_id=actor_id,
            now=now,
            guard_physical_stock=(change_type == 'deduction'),
        )
        if not updated:
            # stock was consumed between the pre-check and the write
            fresh = reload_product_counters(counters.product_id)
            check_deduction_ceiling(fresh.snapshot, amount)
            raise PersistenceError(EM.ADJUSTMENT_FAILED)

        placement_summary = None
        placement_snapshot = None
        if target is not None:
            placement_id, created = stage_inward(
                session,
                business_id=business_id,
                sku=sku,
                target=target,
                amount=amount,
                actor_id=actor_id,
                now=now,
            )
            placement_snapshot = target.snapshot(placement_id)
            placement_summary = {'placementId': placement_id, 'location': target.location, 'created': created}
        elif existing is not None:
            if not deduct_from_placement(
                session,
                business_id=business_id,
                placement_id=existing.id,
                amount=amount,
                actor_id=actor_id,
                now=now,
            ):
                current_quantity = session.execute(
                    db.select(Placement.quantity).where(
                        Placement.business_id == business_id,
                        Placement.id == existing.id,
                    )
                ).scalar_one_or_none() or 0
                raise ValidationError(EM.PLACEMENT_INSUFFICIENT.format(amount=amount, available=current_quantity))
            placement_snapshot = {
                'placementId': existing.id,
                'shelfId': existing.shelf_id,
                'shelfName': existing.shelf_name,
                'rackId': existing.rack_id,
                'rackName': existing.rack_name,
                'zoneId': existing.zone_id,
                'zoneName': existing.zone_name,
                'warehouseId': existing.warehouse_id,
                'warehouseName': existing.warehouse_name,
            }
            placement_summary = {
                'placementId': existing.id,
                'location': f"{existing.warehouse_name} > {existing.location_path}",
            }

        # old/new values come from the row as this transaction now sees it
        current = reload_product_counters(counters.product_id).snapshot
        previous = current.incremented(field_name, -amount)

        entry = stage_log_entry(
            session,
            business_id=business_id,
            product_id=counters.product_id,
            field_name=field_name,
            previous=previous,
            current=current,
            adjustment_type=change_type,
            amount=amount,
            actor=actor,
            placement=placement_snapshot,
            user_agent=user_agent,
            source=source,
            performed_at=now,
        )
        log_id = entry.id
        session.commit()

    except InventoryError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(f"Inventory adjustment failed for {business_id}/{sku}")
        raise PersistenceError(EM.ADJUSTMENT_FAILED) from exc

    logger.info(
        f"INVENTORY ADJUSTED: {business_id}/{sku} {field_name} {getattr(previous, field_name)} -> "
        f"{getattr(current, field_name)}, physical {previous.physical_stock} -> {current.physical_stock}, log={log_id}"
    )
    return AdjustmentResult(
        change_type=change_type,
        amount=amount,
        sku=sku,
        product_name=counters.name,
        field_name=field_name,
        previous=previous,
        current=current,
        log_id=log_id,
        placement=placement_summary,
    )
