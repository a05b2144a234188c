# rental_manager/services/tenants.py
"""Tenant CRUD plus the room-status side effects of leasing and leaving."""
import logging

from .. import db
from ..config import ValidationConfig
from ..enums import RoomStatus, TenantStatus, parse_status
from ..errors import ValidationError
from ..models import Room, Tenant
from .fields import is_blank, require, to_date, to_int, to_number, to_text
from .persistence import get_or_404, transaction

logger = logging.getLogger(__name__)


def _tenant_values(data):
    values = {}
    for key, column in (('firstName', 'first_name'), ('lastName', 'last_name')):
        if key in data:
            values[column] = to_text(data[key], key, ValidationConfig.TENANT_NAME_MAX_LENGTH)
    if 'email' in data:
        values['email'] = to_text(data['email'], 'email')
    if 'phone' in data:
        values['phone'] = to_text(data['phone'], 'phone')
    if 'moveInDate' in data:
        values['move_in_date'] = to_date(data['moveInDate'], 'moveInDate')
    if 'moveOutDate' in data:
        values['move_out_date'] = to_date(data['moveOutDate'], 'moveOutDate')
    if 'rent' in data:
        values['rent'] = to_number(data['rent'], 'rent', minimum=0)
    if 'deposit' in data:
        values['deposit'] = to_number(data['deposit'], 'deposit', minimum=0)
    if 'status' in data and data['status'] is not None:
        values['status'] = parse_status(TenantStatus, data['status']).value
    return values


def _check_dates(move_in, move_out):
    if move_in and move_out and move_out <= move_in:
        raise ValidationError('Move-out date must be after move-in date')


def count_active_tenants(room_id, excluding_id=None):
    q = Tenant.query.filter(Tenant.room_id == room_id,
                            Tenant.status == TenantStatus.ACTIVE.value)
    if excluding_id is not None:
        q = q.filter(Tenant.id != excluding_id)
    return q.count()


def refresh_room_status(room):
    """
    Re-derive OCCUPIED/AVAILABLE from the room's active tenants.

    Rooms in MAINTENANCE or RESERVED are left alone while nobody lives there.
    """
    occupied = count_active_tenants(room.id) > 0
    if occupied:
        room.status = RoomStatus.OCCUPIED.value
    elif room.status == RoomStatus.OCCUPIED.value:
        room.status = RoomStatus.AVAILABLE.value
    return room.status


def list_tenants(status=None, room_id=None):
    q = Tenant.query
    if status:
        q = q.filter_by(status=parse_status(TenantStatus, status).value)
    if not is_blank(room_id):
        q = q.filter_by(room_id=to_int(room_id, 'roomId'))
    return q.order_by(Tenant.created_at.desc(), Tenant.id.desc()).all()


def get_tenant(tenant_id):
    return get_or_404(Tenant, tenant_id, 'Tenant')


def create_tenant(data):
    require(data, 'firstName', 'lastName', 'roomId', 'moveInDate')
    room = get_or_404(Room, to_int(data['roomId'], 'roomId'), 'Room')
    values = _tenant_values(data)
    _check_dates(values.get('move_in_date'), values.get('move_out_date'))
    # rent/deposit are a snapshot of the room's terms unless given explicitly
    if values.get('rent') is None:
        values['rent'] = room.rent
    if values.get('deposit') is None:
        values['deposit'] = room.deposit
    values.setdefault('status', TenantStatus.ACTIVE.value)

    tenant = Tenant(room=room, **values)
    with transaction('create tenant'):
        db.session.add(tenant)
        if tenant.is_active:
            room.status = RoomStatus.OCCUPIED.value
        else:
            db.session.flush()
            refresh_room_status(room)
    logger.info("Tenant %s moved into room %s, room is now %s", tenant.id, room.id, room.status)
    return tenant


def update_tenant(tenant_id, data):
    tenant = get_tenant(tenant_id)
    values = _tenant_values(data)
    for column in ('first_name', 'last_name', 'move_in_date', 'rent'):
        if column in values and values[column] is None:
            del values[column]
    _check_dates(values.get('move_in_date', tenant.move_in_date),
                 values.get('move_out_date', tenant.move_out_date))
    status_changed = 'status' in values and values['status'] != tenant.status

    with transaction('update tenant'):
        for column, value in values.items():
            setattr(tenant, column, value)
        if status_changed:
            db.session.flush()
            refresh_room_status(tenant.room)
    if status_changed:
        logger.info("Tenant %s is now %s, room %s is %s",
                    tenant.id, tenant.status, tenant.room_id, tenant.room.status)
    return tenant


def delete_tenant(tenant_id):
    tenant = get_tenant(tenant_id)
    room = tenant.room
    with transaction('delete tenant'):
        if count_active_tenants(room.id, excluding_id=tenant.id) == 0:
            room.status = RoomStatus.AVAILABLE.value
        db.session.delete(tenant)
    logger.info("Tenant %s deleted, room %s is %s", tenant_id, room.id, room.status)
