# rental_manager/services/utility_consumption.py
import logging

from .. import db
from ..config import ValidationConfig
from ..errors import ValidationError
from ..models import Room, UtilityConsumption
from .fields import is_blank, require, to_int, to_number, to_text
from .persistence import get_or_404, transaction
from .readings import previous_period

logger = logging.getLogger(__name__)

NUMBER_FIELDS = {
    'electricNumber': 'electric_number',
    'waterNumber': 'water_number',
    'previousElectricNumber': 'previous_electric_number',
    'previousWaterNumber': 'previous_water_number',
    'electricCost': 'electric_cost',
    'waterCost': 'water_cost',
}
DUPLICATE_PERIOD = 'A record for this room, month, and year already exists'


def _validate_period(month, year):
    if not (ValidationConfig.MONTH_MIN <= month <= ValidationConfig.MONTH_MAX):
        raise ValidationError('Month must be between 1 and 12')
    if not (ValidationConfig.YEAR_MIN <= year <= ValidationConfig.YEAR_MAX):
        raise ValidationError(
            f'Year must be between {ValidationConfig.YEAR_MIN} and {ValidationConfig.YEAR_MAX}'
        )


def _mutable_values(data):
    """Readings, costs and notes present in ``data``, converted to column values."""
    values = {}
    for key, column in NUMBER_FIELDS.items():
        if key in data:
            values[column] = to_number(data[key], key, minimum=0)
    if 'notes' in data:
        values['notes'] = to_text(data['notes'], 'notes')
    return values


def list_consumptions(room_id=None):
    q = UtilityConsumption.query
    if room_id is not None:
        q = q.filter_by(room_id=room_id)
    return q.order_by(UtilityConsumption.year.desc(), UtilityConsumption.month.desc()).all()


def get_consumption(consumption_id):
    return get_or_404(UtilityConsumption, consumption_id, 'Utility consumption record')


def find_previous(room_id, month, year):
    """The record for the billing period right before (month, year), if any."""
    prev_month, prev_year = previous_period(month, year)
    return UtilityConsumption.query.filter_by(
        room_id=room_id, month=prev_month, year=prev_year
    ).first()


def previous_readings(room_id, month, year):
    """
    Previous-period readings for a new record.

    Returns a dict with ``previousElectricNumber``/``previousWaterNumber``
    (None when there is no record for the previous period) plus the period
    that was looked up.
    """
    _validate_period(month, year)
    prev_month, prev_year = previous_period(month, year)
    prev = find_previous(room_id, month, year)
    return {
        'roomId': room_id,
        'month': prev_month,
        'year': prev_year,
        'found': prev is not None,
        'previousElectricNumber': prev.electric_number if prev else None,
        'previousWaterNumber': prev.water_number if prev else None,
    }


def create_consumption(data):
    require(data, 'roomId', 'month', 'year', 'electricNumber', 'waterNumber')
    room_id = to_int(data['roomId'], 'roomId')
    month = to_int(data['month'], 'month')
    year = to_int(data['year'], 'year')
    _validate_period(month, year)
    values = _mutable_values(data)

    room = get_or_404(Room, room_id, 'Room')

    # Fill in the baseline from last month unless the caller already knows it
    if values.get('previous_electric_number') is None or values.get('previous_water_number') is None:
        prev = find_previous(room.id, month, year)
        if prev is not None:
            if values.get('previous_electric_number') is None:
                values['previous_electric_number'] = prev.electric_number
            if values.get('previous_water_number') is None:
                values['previous_water_number'] = prev.water_number

    record = UtilityConsumption(room=room, month=month, year=year, **values)
    with transaction('create utility consumption record', conflict=DUPLICATE_PERIOD):
        db.session.add(record)
    logger.info("Utility consumption %s created for room %s (%02d/%d)", record.id, room.id, month, year)
    return record


def update_consumption(consumption_id, data):
    record = get_consumption(consumption_id)
    values = _mutable_values(data)
    for key in ('electricNumber', 'waterNumber'):
        column = NUMBER_FIELDS[key]
        if column in values and values[column] is None:
            raise ValidationError(f'{key} cannot be empty')
    with transaction('update utility consumption record'):
        for column, value in values.items():
            setattr(record, column, value)
    logger.info("Utility consumption %s updated", record.id)
    return record


def delete_consumption(consumption_id):
    record = get_consumption(consumption_id)
    with transaction('delete utility consumption record'):
        db.session.delete(record)
    logger.info("Utility consumption %s deleted", consumption_id)


def parse_room_filter(value):
    """Optional ``roomId`` query-string filter."""
    if is_blank(value):
        return None
    return to_int(value, 'roomId')
