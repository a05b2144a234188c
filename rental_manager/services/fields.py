# rental_manager/services/fields.py
"""Coercion of JSON payload values into column types."""
import math
from datetime import date

from flask import request

from ..errors import ValidationError


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def json_body():
    """The request's JSON object; an empty or missing body reads as ``{}``."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def require(data, *fields):
    missing = [f for f in fields if is_blank(data.get(f))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def to_text(value, field, max_length=None):
    if is_blank(value):
        return None
    text = str(value).strip()
    if max_length and len(text) > max_length:
        raise ValidationError(f'{field} max length is {max_length}')
    return text


def to_number(value, field, minimum=None):
    if is_blank(value):
        return None
    # bool is an int subclass; true/false is never a valid reading or amount
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a number')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number')
    # float() takes "NaN" and "inf", and so does the JSON parser
    if not math.isfinite(number):
        raise ValidationError(f'{field} must be a finite number')
    if minimum is not None and number < minimum:
        raise ValidationError(f'{field} must be at least {minimum}')
    return number


def to_int(value, field):
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f'{field} must be an integer')
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f'{field} must be an integer')


def to_date(value, field):
    if is_blank(value):
        return None
    try:
        # accept full ISO timestamps from browsers, keep the date part
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f'Invalid date format for {field}. Use YYYY-MM-DD')


def to_string_list(value, field, unique=False):
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f'{field} must be a list of strings')
    out = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(f'{field} must be a list of strings')
        item = item.strip()
        if not item or (unique and item in out):
            continue
        out.append(item)
    return out
