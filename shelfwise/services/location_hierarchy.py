"""Shelf ancestry checks.

A shelf stores the codes of the rack, zone and warehouse it belongs to. Those
denormalized codes go stale when racks or zones are moved, so before anything
is placed on a shelf the declared ancestry is compared with the records that
were actually resolved for the placement.

Everything here is pure: records may be model instances or plain mappings,
and nothing touches the database.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class PathMismatch:
    level: str
    declared: str | None
    actual: str | None

    def describe(self) -> str:
        return f'{self.level} declared "{self.declared}" but resolved "{self.actual}"'


@dataclass(frozen=True)
class HierarchyCheck:
    valid: bool
    mismatches: tuple[PathMismatch, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return self.valid

    def describe_mismatch(self) -> str:
        return "; ".join(m.describe() for m in self.mismatches)


def _read(record: Any, name: str):
    if record is None:
        return None
    if isinstance(record, Mapping):
        if name in record:
            return record[name]
        # camelCase fixtures (rackId, zoneId, warehouseId)
        head, *rest = name.split('_')
        return record.get(head + ''.join(part.title() for part in rest))
    return getattr(record, name, None)


def _normalize(code) -> str | None:
    if code is None:
        return None
    text = str(code).strip()
    return text or None


def _compare(pairs) -> HierarchyCheck:
    mismatches = []
    for level, declared, actual in pairs:
        declared = _normalize(declared)
        actual = _normalize(actual)
        # a missing code on either side never matches
        if declared is None or actual is None or declared != actual:
            mismatches.append(PathMismatch(level=level, declared=declared, actual=actual))
    return HierarchyCheck(valid=not mismatches, mismatches=tuple(mismatches))


def validate_shelf_path(shelf, rack, zone, warehouse) -> HierarchyCheck:
    """Return whether ``shelf``'s declared ancestry matches the resolved parents.

    Valid iff ``shelf.rack_id == rack.code``, ``shelf.zone_id == zone.code``
    and ``shelf.warehouse_id == warehouse.code``. Missing records count as a
    mismatch, so the function is total.
    """
    return _compare((
        ('shelf rack', _read(shelf, 'rack_id'), _read(rack, 'code')),
        ('shelf zone', _read(shelf, 'zone_id'), _read(zone, 'code')),
        ('shelf warehouse', _read(shelf, 'warehouse_id'), _read(warehouse, 'code')),
    ))


def validate_location_chain(shelf, rack, zone, warehouse) -> HierarchyCheck:
    """Full ancestor check: the shelf path plus the rack's and zone's own parent codes."""
    shelf_check = validate_shelf_path(shelf, rack, zone, warehouse)
    parent_check = _compare((
        ('rack zone', _read(rack, 'zone_id'), _read(zone, 'code')),
        ('rack warehouse', _read(rack, 'warehouse_id'), _read(warehouse, 'code')),
        ('zone warehouse', _read(zone, 'warehouse_id'), _read(warehouse, 'code')),
    ))
    mismatches = shelf_check.mismatches + parent_check.mismatches
    return HierarchyCheck(valid=not mismatches, mismatches=mismatches)
