"""
Inventory counter arithmetic.

Counters are monotonically increasing integers; stock figures are always
derived from them and never stored.
"""

from dataclasses import dataclass, replace

from sqlalchemy import select

from ...models import INVENTORY_COUNTER_FIELDS, Product, db

# adjustment type -> counter column it increments
COUNTER_FIELD_FOR_TYPE = {
    'inward': 'inward_addition',
    'deduction': 'deduction',
}

FIELD_LABELS = {
    'opening_stock': 'Opening Stock',
    'inward_addition': 'Inward Addition',
    'deduction': 'Deduction',
    'auto_addition': 'Auto Addition',
    'auto_deduction': 'Auto Deduction',
    'blocked_stock': 'Blocked Stock',
}


def camel_case(field_name):
    head, *rest = field_name.split('_')
    return head + ''.join(part.title() for part in rest)


@dataclass(frozen=True)
class InventorySnapshot:
    opening_stock: int = 0
    inward_addition: int = 0
    deduction: int = 0
    auto_addition: int = 0
    auto_deduction: int = 0
    blocked_stock: int = 0

    @classmethod
    def from_row(cls, row):
        """Build from a product instance or a mapping; missing counters read as 0."""
        values = {}
        for name in INVENTORY_COUNTER_FIELDS:
            if hasattr(row, 'get'):
                raw = row.get(name)
            else:
                raw = getattr(row, name, None)
            values[name] = int(raw or 0)
        return cls(**values)

    @property
    def physical_stock(self) -> int:
        return (
            self.opening_stock
            + self.inward_addition
            - self.deduction
            + self.auto_addition
            - self.auto_deduction
        )

    @property
    def available_stock(self) -> int:
        return self.physical_stock - self.blocked_stock

    def incremented(self, field_name: str, amount: int) -> 'InventorySnapshot':
        return replace(self, **{field_name: getattr(self, field_name) + amount})

    def summary(self, field_name: str) -> dict:
        return {
            camel_case(field_name): getattr(self, field_name),
            'physicalStock': self.physical_stock,
            'availableStock': self.available_stock,
        }


@dataclass(frozen=True)
class ProductCounters:
    product_id: int
    sku: str
    name: str
    snapshot: InventorySnapshot


def _counter_query():
    columns = [getattr(Product, name) for name in INVENTORY_COUNTER_FIELDS]
    return select(Product.id, Product.sku, Product.name, *columns)


def _to_counters(row):
    if row is None:
        return None
    mapping = row._mapping
    return ProductCounters(
        product_id=mapping['id'],
        sku=mapping['sku'],
        name=mapping['name'],
        snapshot=InventorySnapshot.from_row(mapping),
    )


def load_product_counters(business_id: str, sku: str):
    """Read counters straight from the database, bypassing the identity map."""
    row = db.session.execute(
        _counter_query().where(Product.business_id == business_id, Product.sku == sku)
    ).first()
    return _to_counters(row)


def reload_product_counters(product_id: int):
    row = db.session.execute(_counter_query().where(Product.id == product_id)).first()
    return _to_counters(row)


def load_counters_for_skus(business_id: str, skus):
    """Map SKU -> ProductCounters for every SKU that exists."""
    skus = sorted(set(skus))
    if not skus:
        return {}
    rows = db.session.execute(
        _counter_query().where(Product.business_id == business_id, Product.sku.in_(skus))
    ).all()
    counters = (_to_counters(row) for row in rows)
    return {entry.sku: entry for entry in counters}
