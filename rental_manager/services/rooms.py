# rental_manager/services/rooms.py
import logging

from .. import db
from ..config import ValidationConfig
from ..enums import RoomStatus, parse_status
from ..errors import ValidationError
from ..models import Room
from .fields import require, to_int, to_number, to_string_list, to_text
from .persistence import get_or_404, transaction

logger = logging.getLogger(__name__)


def _room_values(data):
    values = {}
    if 'name' in data:
        values['name'] = to_text(data['name'], 'name', ValidationConfig.ROOM_NAME_MAX_LENGTH)
    if 'description' in data:
        values['description'] = to_text(data['description'], 'description')
    if 'address' in data:
        values['address'] = to_text(data['address'], 'address', ValidationConfig.ADDRESS_MAX_LENGTH)
    if 'rent' in data:
        values['rent'] = to_number(data['rent'], 'rent', minimum=0)
    if 'deposit' in data:
        values['deposit'] = to_number(data['deposit'], 'deposit', minimum=0)
    if 'size' in data:
        values['size'] = to_number(data['size'], 'size', minimum=0)
    for field in ('bedrooms', 'bathrooms'):
        if field in data:
            count = to_int(data[field], field)
            if count is not None and count < 0:
                raise ValidationError(f'{field} cannot be negative')
            values[field] = count
    if 'status' in data and data['status'] is not None:
        values['status'] = parse_status(RoomStatus, data['status']).value
    if 'amenities' in data:
        values['amenities'] = to_string_list(data['amenities'], 'amenities', unique=True)
    if 'images' in data:
        values['images'] = to_string_list(data['images'], 'images')
    return values


def list_rooms(status=None):
    q = Room.query
    if status:
        q = q.filter_by(status=parse_status(RoomStatus, status).value)
    return q.order_by(Room.created_at.desc(), Room.id.desc()).all()


def get_room(room_id):
    return get_or_404(Room, room_id, 'Room')


def create_room(data):
    require(data, 'name', 'address', 'rent')
    values = _room_values(data)
    # counts are optional on create; NULL is not
    for field in ('bedrooms', 'bathrooms'):
        if values.get(field) is None:
            values[field] = 1
    room = Room(**values)
    with transaction('create room'):
        db.session.add(room)
    logger.info("Room %s created (%s)", room.id, room.name)
    return room


def update_room(room_id, data):
    room = get_room(room_id)
    values = _room_values(data)
    # required columns keep their value when the payload blanks them
    for field in ('name', 'address', 'rent', 'bedrooms', 'bathrooms'):
        if field in values and values[field] is None:
            del values[field]
    with transaction('update room'):
        for field, value in values.items():
            setattr(room, field, value)
    logger.info("Room %s updated", room.id)
    return room


def delete_room(room_id):
    room = get_room(room_id)
    with transaction('delete room'):
        db.session.delete(room)
    logger.info("Room %s deleted", room_id)
