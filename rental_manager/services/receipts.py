# rental_manager/services/receipts.py
from datetime import datetime, timezone

from ..enums import PaymentStatus, TenantStatus
from ..models import Payment, Room, Tenant
from .persistence import get_or_404


def payment_statistics(payments):
    """Totals shown at the bottom of a receipt."""
    return {
        'totalPaid': round(sum(p.amount for p in payments if p.status == PaymentStatus.PAID.value), 2),
        'pendingCount': sum(1 for p in payments if p.status == PaymentStatus.PENDING.value),
        'overdueCount': sum(1 for p in payments if p.status == PaymentStatus.OVERDUE.value),
    }


def generate_receipt(room_id):
    """
    Read-only summary of a room: its attributes, the tenant living there,
    every payment recorded against the room's tenants (newest first) and
    the derived totals.
    """
    room = get_or_404(Room, room_id, 'Room')

    active = room.tenants.filter_by(status=TenantStatus.ACTIVE.value) \
                         .order_by(Tenant.created_at.desc(), Tenant.id.desc()) \
                         .first()
    payments = Payment.query.join(Tenant) \
                            .filter(Tenant.room_id == room.id) \
                            .order_by(Payment.date.desc(), Payment.id.desc()) \
                            .all()

    room_data = room.to_dict()
    for key in ('images', 'createdAt', 'updatedAt'):
        room_data.pop(key, None)

    tenant_data = None
    if active is not None:
        tenant_data = {
            'id': active.id,
            'firstName': active.first_name,
            'lastName': active.last_name,
            'email': active.email,
            'phone': active.phone,
            'moveInDate': active.move_in_date.isoformat() if active.move_in_date else None,
            'moveOutDate': active.move_out_date.isoformat() if active.move_out_date else None,
        }

    return {
        'room': room_data,
        'tenant': tenant_data,
        'payments': [
            {
                'id': p.id,
                'tenantId': p.tenant_id,
                'amount': p.amount,
                'date': p.date.isoformat() if p.date else None,
                'dueDate': p.due_date.isoformat() if p.due_date else None,
                'status': p.status,
                'method': p.method,
                'notes': p.notes,
            }
            for p in payments
        ],
        'statistics': payment_statistics(payments),
        'generatedAt': datetime.now(timezone.utc).isoformat(),
    }
