import uuid

from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils


def new_log_id():
    return uuid.uuid4().hex


class ProductLog(db.Model):
    """Append-only audit entry for a product's inventory counters."""
    __tablename__ = 'product_logs'

    id = db.Column(db.String(32), primary_key=True, default=new_log_id)
    business_id = db.Column(db.String(64), db.ForeignKey('business.id'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False, index=True)

    action = db.Column(db.String(64), nullable=False)
    changes = db.Column(db.JSON, nullable=False, default=list)
    adjustment_type = db.Column(db.String(32), nullable=False)
    adjustment_amount = db.Column(db.Integer, nullable=False)

    performed_by = db.Column(db.String(64), nullable=False)
    performed_by_email = db.Column(db.String(120), nullable=True)
    performed_at = db.Column(db.DateTime(timezone=True), default=TimezoneUtils.utc_now, nullable=False, index=True)

    placement = db.Column(db.JSON, nullable=True)
    # "metadata" is reserved on declarative models
    log_metadata = db.Column('metadata', db.JSON, nullable=True)

    product = db.relationship('Product', back_populates='logs')

    __table_args__ = (
        db.Index('idx_product_log_product_performed', 'product_id', 'performed_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'action': self.action,
            'changes': self.changes,
            'adjustmentType': self.adjustment_type,
            'adjustmentAmount': self.adjustment_amount,
            'performedBy': self.performed_by,
            'performedByEmail': self.performed_by_email,
            'performedAt': TimezoneUtils.to_iso(self.performed_at),
            'placement': self.placement,
            'metadata': self.log_metadata,
        }

    def __repr__(self):
        return f'<ProductLog {self.id} | {self.adjustment_type} {self.adjustment_amount}>'
