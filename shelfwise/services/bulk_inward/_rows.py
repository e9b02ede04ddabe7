"""Row model for bulk inward sheets."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from ...models import MAX_STOCK_QUANTITY
from ...utils.error_messages import ErrorMessages as EM

WAREHOUSE_CODE = 'Warehouse Code'
ZONE_CODE = 'Zone Code'
RACK_CODE = 'Rack Code'
SHELF_CODE = 'Shelf Code'
PRODUCT_SKU = 'Business Product SKU'
PRODUCT_QUANTITY = 'Business Product Quantity'

REQUIRED_COLUMNS = (
    WAREHOUSE_CODE,
    ZONE_CODE,
    RACK_CODE,
    SHELF_CODE,
    PRODUCT_SKU,
    PRODUCT_QUANTITY,
)

STATUS_SUCCESS = 'Success'
STATUS_ERROR = 'Error'
STATUS_SKIPPED = 'Skipped'
STATUS_PENDING = 'Pending'


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_quantity(value: str | None) -> int | None:
    """Positive whole number or None; ``"12.0"`` is accepted, ``"1.5"`` is not."""
    if value is None:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        return None
    if not number.is_finite() or number <= 0 or number != number.to_integral_value():
        return None
    return int(number)


@dataclass
class InwardRow:
    row_number: int
    warehouse_code: str | None
    zone_code: str | None
    rack_code: str | None
    shelf_code: str | None
    sku: str | None
    quantity_text: str | None
    values: dict = field(default_factory=dict)
    extras: dict = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], row_number: int) -> 'InwardRow':
        def code(column):
            text = _clean(mapping.get(column))
            return text.upper() if text else None

        extras = {key: value for key, value in mapping.items() if key not in REQUIRED_COLUMNS}
        return cls(
            row_number=row_number,
            warehouse_code=code(WAREHOUSE_CODE),
            zone_code=code(ZONE_CODE),
            rack_code=code(RACK_CODE),
            shelf_code=code(SHELF_CODE),
            sku=code(PRODUCT_SKU),
            quantity_text=_clean(mapping.get(PRODUCT_QUANTITY)),
            values=dict(mapping),
            extras=extras,
        )

    @property
    def is_blank(self) -> bool:
        return not any((
            self.warehouse_code,
            self.zone_code,
            self.rack_code,
            self.shelf_code,
            self.sku,
            self.quantity_text,
        ))

    @property
    def quantity(self) -> int | None:
        return parse_quantity(self.quantity_text)

    def validation_error(self) -> str | None:
        """First problem with the row, in column order, or None when it is usable."""
        required = (
            (WAREHOUSE_CODE, self.warehouse_code),
            (ZONE_CODE, self.zone_code),
            (RACK_CODE, self.rack_code),
            (SHELF_CODE, self.shelf_code),
            (PRODUCT_SKU, self.sku),
            (PRODUCT_QUANTITY, self.quantity_text),
        )
        for column, value in required:
            if not value:
                return EM.ROW_FIELD_REQUIRED.format(row=self.row_number, column=column)
        if self.quantity is None:
            return EM.ROW_QUANTITY_INVALID.format(row=self.row_number)
        if self.quantity > MAX_STOCK_QUANTITY:
            return EM.ROW_QUANTITY_TOO_LARGE.format(row=self.row_number, limit=MAX_STOCK_QUANTITY)
        return None


@dataclass
class RowResult:
    row: InwardRow
    status: str = STATUS_PENDING
    message: str = ''

    def mark(self, status: str, message: str) -> 'RowResult':
        self.status = status
        self.message = message
        return self

    def success(self, message):
        return self.mark(STATUS_SUCCESS, message)

    def error(self, message):
        return self.mark(STATUS_ERROR, message)

    def skipped(self, message):
        return self.mark(STATUS_SKIPPED, message)

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING

    def as_record(self) -> dict:
        record = dict(self.row.values)
        record['Status'] = self.status
        record['Message'] = self.message
        return record
