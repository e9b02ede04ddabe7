from flask_login import UserMixin

from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils
from .mixins import TimestampMixin


class Business(TimestampMixin, db.Model):
    """A tenant. Every warehouse, product and placement hangs off one."""
    __tablename__ = 'business'

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    members = db.relationship('BusinessMember', back_populates='business', lazy='dynamic')

    def __repr__(self):
        return f'<Business {self.id}>'


class User(UserMixin, db.Model):
    __tablename__ = 'app_user'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(128), nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime(timezone=True), default=TimezoneUtils.utc_now)

    memberships = db.relationship('BusinessMember', back_populates='user', lazy='dynamic')

    def membership_for(self, business_id):
        return self.memberships.filter_by(business_id=business_id).first()

    def __repr__(self):
        return f'<User {self.id}>'


class BusinessMember(TimestampMixin, db.Model):
    """Links a user to a business. Only `active` members may act on its stock."""
    __tablename__ = 'business_member'

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.String(64), db.ForeignKey('business.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('app_user.id'), nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False, default='member')
    status = db.Column(db.String(16), nullable=False, default='active')

    business = db.relationship('Business', back_populates='members')
    user = db.relationship('User', back_populates='memberships')

    __table_args__ = (
        db.UniqueConstraint('business_id', 'user_id', name='_business_member_uc'),
    )

    @property
    def is_active(self):
        return self.status == 'active'
