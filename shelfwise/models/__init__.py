"""Models package - imports all models for the application"""
from ..extensions import db
from .mixins import BusinessScopedMixin, TimestampMixin

# Import in dependency order for PostgreSQL table creation
from .business import Business, BusinessMember, User
from .location import Rack, Shelf, Warehouse, Zone
from .product import INVENTORY_COUNTER_FIELDS, MAX_STOCK_QUANTITY, Product
from .placement import Placement
from .product_log import ProductLog

__all__ = [
    'db',
    'BusinessScopedMixin',
    'TimestampMixin',
    'Business',
    'BusinessMember',
    'User',
    'Warehouse',
    'Zone',
    'Rack',
    'Shelf',
    'Product',
    'INVENTORY_COUNTER_FIELDS',
    'MAX_STOCK_QUANTITY',
    'Placement',
    'ProductLog',
]
