# rental_manager/models.py
from datetime import date, datetime, timezone

from . import db
from .enums import RoomStatus, TenantStatus, PaymentStatus
from .services.readings import (
    ELECTRIC_UNIT, WATER_UNIT, consumption, display_total_cost, format_currency, format_reading,
)


def _iso(value):
    return value.isoformat() if value else None


def _utcnow():
    # naive UTC, SQLite drops tzinfo anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)


class Room(TimestampMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    address = db.Column(db.String(255), nullable=False)
    rent = db.Column(db.Float, nullable=False)
    deposit = db.Column(db.Float, nullable=True)
    size = db.Column(db.Float, nullable=True)
    bedrooms = db.Column(db.Integer, nullable=False, default=1)
    bathrooms = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(20), nullable=False, default=RoomStatus.AVAILABLE.value)
    amenities = db.Column(db.JSON, nullable=False, default=list)
    images = db.Column(db.JSON, nullable=False, default=list)

    tenants = db.relationship('Tenant', back_populates='room', lazy='dynamic',
                              cascade='all, delete-orphan')
    utility_consumptions = db.relationship('UtilityConsumption', back_populates='room', lazy='dynamic',
                                           cascade='all, delete-orphan')

    def active_tenants(self):
        return self.tenants.filter_by(status=TenantStatus.ACTIVE.value) \
                           .order_by(Tenant.created_at.desc(), Tenant.id.desc()) \
                           .all()

    def identity(self):
        """Minimal fields attached to records owned by this room."""
        return {'id': self.id, 'name': self.name, 'address': self.address}

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'address': self.address,
            'rent': self.rent,
            'deposit': self.deposit,
            'size': self.size,
            'bedrooms': self.bedrooms,
            'bathrooms': self.bathrooms,
            'status': self.status,
            'amenities': list(self.amenities or []),
            'images': list(self.images or []),
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Tenant(TimestampMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False, index=True)
    move_in_date = db.Column(db.Date, nullable=False)
    move_out_date = db.Column(db.Date, nullable=True)  # null means still living there
    rent = db.Column(db.Float, nullable=False)
    deposit = db.Column(db.Float, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=TenantStatus.ACTIVE.value)

    room = db.relationship('Room', back_populates='tenants')
    payments = db.relationship('Payment', back_populates='tenant', lazy='dynamic',
                               cascade='all, delete-orphan')

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self):
        return self.status == TenantStatus.ACTIVE.value

    def recent_payments(self, limit=None):
        q = self.payments.order_by(Payment.due_date.desc(), Payment.id.desc())
        if limit:
            q = q.limit(limit)
        return q.all()

    def to_dict(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'fullName': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'roomId': self.room_id,
            'moveInDate': _iso(self.move_in_date),
            'moveOutDate': _iso(self.move_out_date),
            'rent': self.rent,
            'deposit': self.deposit,
            'status': self.status,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Payment(TimestampMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenant.id'), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    due_date = db.Column(db.Date, nullable=False)
    date = db.Column(db.Date, nullable=False, default=date.today)
    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value)
    method = db.Column(db.String(50), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    tenant = db.relationship('Tenant', back_populates='payments')

    def to_dict(self):
        return {
            'id': self.id,
            'tenantId': self.tenant_id,
            'amount': self.amount,
            'dueDate': _iso(self.due_date),
            'date': _iso(self.date),
            'status': self.status,
            'method': self.method,
            'notes': self.notes,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class UtilityConsumption(TimestampMixin, db.Model):
    """Monthly electric and water meter readings for one room."""
    __tablename__ = 'utility_consumption'
    __table_args__ = (
        db.UniqueConstraint('room_id', 'month', 'year', name='uq_utility_room_period'),
    )

    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False, index=True)
    month = db.Column(db.Integer, nullable=False)
    year = db.Column(db.Integer, nullable=False)
    electric_number = db.Column(db.Float, nullable=False)
    water_number = db.Column(db.Float, nullable=False)
    previous_electric_number = db.Column(db.Float, nullable=True)
    previous_water_number = db.Column(db.Float, nullable=True)
    electric_cost = db.Column(db.Float, nullable=True)
    water_cost = db.Column(db.Float, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    room = db.relationship('Room', back_populates='utility_consumptions')

    @property
    def electric_consumption(self):
        return consumption(self.electric_number, self.previous_electric_number)

    @property
    def water_consumption(self):
        return consumption(self.water_number, self.previous_water_number)

    def formatted(self):
        """Two-decimal display strings; values that are not shown are None."""
        return {
            'electricNumber': format_reading(self.electric_number, ELECTRIC_UNIT),
            'waterNumber': format_reading(self.water_number, WATER_UNIT),
            'previousElectricNumber': format_reading(self.previous_electric_number, ELECTRIC_UNIT),
            'previousWaterNumber': format_reading(self.previous_water_number, WATER_UNIT),
            'electricConsumption': format_reading(self.electric_consumption, ELECTRIC_UNIT),
            'waterConsumption': format_reading(self.water_consumption, WATER_UNIT),
            'electricCost': format_currency(self.electric_cost) if self.electric_cost else None,
            'waterCost': format_currency(self.water_cost) if self.water_cost else None,
            'totalCost': format_currency(display_total_cost(self.electric_cost, self.water_cost)),
        }

    def to_dict(self, include_room=True):
        data = {
            'id': self.id,
            'roomId': self.room_id,
            'month': self.month,
            'year': self.year,
            'electricNumber': self.electric_number,
            'waterNumber': self.water_number,
            'previousElectricNumber': self.previous_electric_number,
            'previousWaterNumber': self.previous_water_number,
            'electricCost': self.electric_cost,
            'waterCost': self.water_cost,
            'notes': self.notes,
            'electricConsumption': self.electric_consumption,
            'waterConsumption': self.water_consumption,
            'totalCost': display_total_cost(self.electric_cost, self.water_cost),
            'formatted': self.formatted(),
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }
        if include_room and self.room is not None:
            data['room'] = self.room.identity()
        return data
