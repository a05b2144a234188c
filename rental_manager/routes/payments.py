from flask import Blueprint, request, jsonify
from ..auth import load_session
from ..services.fields import json_body
from ..services import payments as payment_service

payments_bp = Blueprint('payments', __name__)
payments_bp.before_request(load_session)

@payments_bp.route('/payments', methods=['GET'])
def list_payments():
    payments = payment_service.list_payments(
        status=request.args.get('status'),
        tenant_id=request.args.get('tenantId'),
    )
    out = []
    for payment in payments:
        data = payment.to_dict()
        tenant = payment.tenant.to_dict()
        tenant['room'] = payment.tenant.room.to_dict()
        data['tenant'] = tenant
        out.append(data)
    return jsonify(out), 200

@payments_bp.route('/payments', methods=['POST'])
def create_payment():
    data = json_body()
    payment = payment_service.create_payment(data)
    return jsonify(payment.to_dict()), 201

@payments_bp.route('/payments/<int:id>', methods=['GET'])
def get_payment(id):
    payment = payment_service.get_payment(id)
    return jsonify(payment.to_dict()), 200

@payments_bp.route('/payments/<int:id>', methods=['PUT'])
def update_payment(id):
    data = json_body()
    payment = payment_service.update_payment(id, data)
    return jsonify(payment.to_dict()), 200

@payments_bp.route('/payments/<int:id>', methods=['DELETE'])
def delete_payment(id):
    payment_service.delete_payment(id)
    return jsonify({'success': True}), 200
