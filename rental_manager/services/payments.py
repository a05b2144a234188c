# rental_manager/services/payments.py
import logging
from datetime import date

from .. import db
from ..enums import PaymentStatus, parse_status
from ..models import Payment, Tenant
from .fields import is_blank, require, to_date, to_int, to_number, to_text
from .persistence import get_or_404, transaction

logger = logging.getLogger(__name__)


def _payment_values(data):
    values = {}
    if 'amount' in data:
        values['amount'] = to_number(data['amount'], 'amount', minimum=0)
    if 'dueDate' in data:
        values['due_date'] = to_date(data['dueDate'], 'dueDate')
    if 'date' in data:
        values['date'] = to_date(data['date'], 'date')
    if 'status' in data and data['status'] is not None:
        values['status'] = parse_status(PaymentStatus, data['status']).value
    if 'method' in data:
        values['method'] = to_text(data['method'], 'method')
    if 'notes' in data:
        values['notes'] = to_text(data['notes'], 'notes')
    return values


def list_payments(status=None, tenant_id=None):
    q = Payment.query
    if status:
        q = q.filter_by(status=parse_status(PaymentStatus, status).value)
    if not is_blank(tenant_id):
        q = q.filter_by(tenant_id=to_int(tenant_id, 'tenantId'))
    return q.order_by(Payment.due_date.desc(), Payment.id.desc()).all()


def get_payment(payment_id):
    return get_or_404(Payment, payment_id, 'Payment')


def create_payment(data):
    require(data, 'tenantId', 'amount', 'dueDate')
    tenant = get_or_404(Tenant, to_int(data['tenantId'], 'tenantId'), 'Tenant')
    values = _payment_values(data)
    if values.get('date') is None:
        values['date'] = date.today()
    values.setdefault('status', PaymentStatus.PENDING.value)

    payment = Payment(tenant=tenant, **values)
    with transaction('create payment'):
        db.session.add(payment)
    logger.info("Payment %s of %.2f recorded for tenant %s", payment.id, payment.amount, tenant.id)
    return payment


def update_payment(payment_id, data):
    payment = get_payment(payment_id)
    values = _payment_values(data)
    for column in ('amount', 'due_date', 'date'):
        if column in values and values[column] is None:
            del values[column]
    with transaction('update payment'):
        for column, value in values.items():
            setattr(payment, column, value)
    logger.info("Payment %s updated", payment.id)
    return payment


def delete_payment(payment_id):
    payment = get_payment(payment_id)
    with transaction('delete payment'):
        db.session.delete(payment)
    logger.info("Payment %s deleted", payment_id)
