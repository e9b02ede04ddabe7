"""Warehouse → zone → rack → shelf hierarchy.

Children reference their parents by code (``zone.warehouse_id`` holds a
warehouse *code*), never by row id, so that a stale spreadsheet or a moved
rack can be detected by comparing codes. These rows are owned by the
warehouse-management flows; the stock ledger only reads them.
"""
from ..extensions import db
from .mixins import ActorStampMixin, BusinessScopedMixin, SoftDeleteMixin, TimestampMixin


class Warehouse(BusinessScopedMixin, SoftDeleteMixin, TimestampMixin, ActorStampMixin, db.Model):
    __tablename__ = 'warehouses'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(128), nullable=False)
    address = db.Column(db.String(512), nullable=True)
    storage_capacity = db.Column(db.Integer, nullable=True)

    stats_total_zones = db.Column(db.Integer, default=0, nullable=False)
    stats_total_racks = db.Column(db.Integer, default=0, nullable=False)
    stats_total_shelves = db.Column(db.Integer, default=0, nullable=False)
    stats_total_products = db.Column(db.Integer, default=0, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('business_id', 'code', name='_warehouse_business_code_uc'),
    )

    def __repr__(self):
        return f'<Warehouse {self.business_id}/{self.code}>'


class Zone(BusinessScopedMixin, SoftDeleteMixin, TimestampMixin, ActorStampMixin, db.Model):
    __tablename__ = 'zones'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(128), nullable=False)
    warehouse_id = db.Column(db.String(64), nullable=False, index=True)

    stats_total_racks = db.Column(db.Integer, default=0, nullable=False)
    stats_total_shelves = db.Column(db.Integer, default=0, nullable=False)
    stats_total_products = db.Column(db.Integer, default=0, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('business_id', 'code', name='_zone_business_code_uc'),
    )

    def __repr__(self):
        return f'<Zone {self.business_id}/{self.code} in {self.warehouse_id}>'


class Rack(BusinessScopedMixin, SoftDeleteMixin, TimestampMixin, ActorStampMixin, db.Model):
    __tablename__ = 'racks'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(128), nullable=False)
    warehouse_id = db.Column(db.String(64), nullable=False, index=True)
    zone_id = db.Column(db.String(64), nullable=False, index=True)
    position = db.Column(db.Integer, default=0, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('business_id', 'code', name='_rack_business_code_uc'),
    )

    def __repr__(self):
        return f'<Rack {self.business_id}/{self.code} in {self.zone_id}>'


class Shelf(BusinessScopedMixin, SoftDeleteMixin, TimestampMixin, ActorStampMixin, db.Model):
    __tablename__ = 'shelves'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(128), nullable=False)
    warehouse_id = db.Column(db.String(64), nullable=False, index=True)
    zone_id = db.Column(db.String(64), nullable=False, index=True)
    rack_id = db.Column(db.String(64), nullable=False, index=True)
    position = db.Column(db.Integer, default=0, nullable=False)
    capacity = db.Column(db.Integer, nullable=True)

    __table_args__ = (
        db.UniqueConstraint('business_id', 'code', name='_shelf_business_code_uc'),
    )

    def __repr__(self):
        return f'<Shelf {self.business_id}/{self.code} in {self.rack_id}>'
