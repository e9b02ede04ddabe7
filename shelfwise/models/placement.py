from ..extensions import db
from .mixins import ActorStampMixin, TimestampMixin


class Placement(TimestampMixin, ActorStampMixin, db.Model):
    """How many units of one SKU sit on one shelf.

    The key is ``f"{sku}_{shelf_code}"`` so repeated inward movements for the
    same pair land on the same row. Location names are denormalized for
    display; codes are the authoritative references.
    """
    __tablename__ = 'placements'

    business_id = db.Column(db.String(64), db.ForeignKey('business.id'), primary_key=True)
    id = db.Column(db.String(255), primary_key=True)

    product_id = db.Column(db.String(128), nullable=False, index=True)
    product_sku = db.Column(db.String(128), nullable=False)
    quantity = db.Column(db.Integer, default=0, nullable=False)

    shelf_id = db.Column(db.String(64), nullable=False, index=True)
    shelf_name = db.Column(db.String(128), nullable=True)
    rack_id = db.Column(db.String(64), nullable=False)
    rack_name = db.Column(db.String(128), nullable=True)
    zone_id = db.Column(db.String(64), nullable=False)
    zone_name = db.Column(db.String(128), nullable=True)
    warehouse_id = db.Column(db.String(64), nullable=False)
    warehouse_name = db.Column(db.String(128), nullable=True)

    last_movement_reason = db.Column(db.String(64), nullable=True)
    last_movement_reference = db.Column(db.String(255), nullable=True)

    __table_args__ = (
        db.CheckConstraint('quantity >= 0', name='ck_placement_quantity_non_negative'),
        db.Index('idx_placement_product_quantity', 'business_id', 'product_id', 'quantity'),
    )

    @property
    def location_path(self):
        return f"{self.zone_name} > {self.rack_name} > {self.shelf_name}"

    def to_dict(self):
        return {
            'id': self.id,
            'productId': self.product_id,
            'productSKU': self.product_sku,
            'quantity': self.quantity,
            'shelfId': self.shelf_id,
            'shelfName': self.shelf_name,
            'rackId': self.rack_id,
            'rackName': self.rack_name,
            'zoneId': self.zone_id,
            'zoneName': self.zone_name,
            'warehouseId': self.warehouse_id,
            'warehouseName': self.warehouse_name,
            'locationPath': self.location_path,
            'lastMovementReason': self.last_movement_reason,
            'lastMovementReference': self.last_movement_reference,
        }

    def __repr__(self):
        return f'<Placement {self.business_id}/{self.id} qty={self.quantity}>'
