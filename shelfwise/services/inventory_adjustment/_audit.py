"""
Audit Trail for Inventory Adjustments

Every counter mutation appends exactly one ProductLog in the same transaction.
Nothing here commits; callers decide when the unit of work ends.
"""

import logging

from ...models.product_log import ProductLog, new_log_id
from ...utils.timezone_utils import TimezoneUtils
from ._counters import FIELD_LABELS, camel_case

logger = logging.getLogger(__name__)

ADJUSTMENT_ACTION = 'inventory_adjusted'
BULK_INWARD_ACTION = 'bulk_inward'


def build_changes(field_name, old_value, new_value):
    return [{
        'field': f'inventory.{camel_case(field_name)}',
        'fieldLabel': FIELD_LABELS[field_name],
        'oldValue': old_value,
        'newValue': new_value,
    }]


def stage_log_entry(
    session,
    *,
    business_id,
    product_id,
    field_name,
    previous,
    current,
    adjustment_type,
    amount,
    actor,
    action=ADJUSTMENT_ACTION,
    placement=None,
    user_agent=None,
    source=None,
    performed_at=None,
):
    """Add a ProductLog describing ``previous -> current`` to ``session``."""
    metadata = {
        'previousPhysicalStock': previous.physical_stock,
        'newPhysicalStock': current.physical_stock,
        'previousAvailableStock': previous.available_stock,
        'newAvailableStock': current.available_stock,
    }
    if user_agent:
        metadata['userAgent'] = user_agent
    if source:
        metadata['source'] = source

    entry = ProductLog(
        id=new_log_id(),
        business_id=business_id,
        product_id=product_id,
        action=action,
        changes=build_changes(field_name, getattr(previous, field_name), getattr(current, field_name)),
        adjustment_type=adjustment_type,
        adjustment_amount=amount,
        performed_by=str(actor.id) if actor is not None else 'unknown',
        performed_by_email=getattr(actor, 'email', None),
        performed_at=performed_at or TimezoneUtils.utc_now(),
        placement=placement,
        log_metadata=metadata,
    )
    session.add(entry)
    logger.debug(f"Staged product log {entry.id} for product {product_id}: {adjustment_type} {amount}")
    return entry
