from enum import Enum

from .errors import ValidationError


class RoomStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    MAINTENANCE = "MAINTENANCE"
    RESERVED = "RESERVED"


class TenantStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    MOVED_OUT = "MOVED_OUT"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


def parse_status(enum_cls, value, field='status'):
    """Return the enum member for ``value`` or raise ValidationError."""
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ', '.join(m.value for m in enum_cls)
        raise ValidationError(f'{field} must be one of: {allowed}')
