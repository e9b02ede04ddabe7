"""
Inventory Adjustment Service - Canonical Entry Point

All manual changes to a product's inventory counters go through
adjust_inventory; the bulk inward pipeline reuses the same counter and audit
helpers so both paths write identical log entries.
"""

from ._audit import ADJUSTMENT_ACTION, BULK_INWARD_ACTION, build_changes, stage_log_entry
from ._core import AdjustmentResult, adjust_inventory, increment_counter
from ._counters import (
    COUNTER_FIELD_FOR_TYPE,
    InventorySnapshot,
    ProductCounters,
    load_counters_for_skus,
    load_product_counters,
    reload_product_counters,
)
from ._validation import ADJUSTMENT_TYPES, check_deduction_ceiling, validate_amount

# Public API - expose the canonical functions needed by blueprints and the bulk pipeline
__all__ = [
    'adjust_inventory',
    'AdjustmentResult',
    'InventorySnapshot',
    'ProductCounters',
    'ADJUSTMENT_TYPES',
    'COUNTER_FIELD_FOR_TYPE',
    'ADJUSTMENT_ACTION',
    'BULK_INWARD_ACTION',
    'build_changes',
    'stage_log_entry',
    'increment_counter',
    'load_counters_for_skus',
    'load_product_counters',
    'reload_product_counters',
    'check_deduction_ceiling',
    'validate_amount',
]
