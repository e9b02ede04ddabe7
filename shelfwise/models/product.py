from sqlalchemy.ext.hybrid import hybrid_property

from ..extensions import db
from .mixins import ActorStampMixin, BusinessScopedMixin, TimestampMixin

INVENTORY_COUNTER_FIELDS = (
    'opening_stock',
    'inward_addition',
    'deduction',
    'auto_addition',
    'auto_deduction',
    'blocked_stock',
)

# counters and placement quantities are 32-bit Integer columns
MAX_STOCK_QUANTITY = 2**31 - 1


class Product(BusinessScopedMixin, TimestampMixin, ActorStampMixin, db.Model):
    """A business product keyed by SKU, carrying its inventory counters.

    Counters only ever grow; stock is derived from them. Mutate them through
    ``services.inventory_adjustment`` or the bulk inward pipeline, both of
    which issue SQL-side increments.
    """
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    sku = db.Column(db.String(128), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    opening_stock = db.Column(db.Integer, default=0, nullable=False)
    inward_addition = db.Column(db.Integer, default=0, nullable=False)
    deduction = db.Column(db.Integer, default=0, nullable=False)
    auto_addition = db.Column(db.Integer, default=0, nullable=False)
    auto_deduction = db.Column(db.Integer, default=0, nullable=False)
    blocked_stock = db.Column(db.Integer, default=0, nullable=False)

    logs = db.relationship(
        'ProductLog',
        back_populates='product',
        lazy='dynamic',
        order_by='ProductLog.performed_at.desc()',
    )

    __table_args__ = (
        db.UniqueConstraint('business_id', 'sku', name='_product_business_sku_uc'),
    )

    @hybrid_property
    def physical_stock(self):
        return (
            self.opening_stock
            + self.inward_addition
            - self.deduction
            + self.auto_addition
            - self.auto_deduction
        )

    @hybrid_property
    def available_stock(self):
        return self.physical_stock - self.blocked_stock

    def __repr__(self):
        return f'<Product {self.business_id}/{self.sku}>'
