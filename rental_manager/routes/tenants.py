from flask import Blueprint, request, jsonify
from ..auth import load_session
from ..services.fields import json_body
from ..services import tenants as tenant_service

tenants_bp = Blueprint('tenants', __name__)
tenants_bp.before_request(load_session)

@tenants_bp.route('/tenants', methods=['GET'])
def list_tenants():
    tenants = tenant_service.list_tenants(
        status=request.args.get('status'),
        room_id=request.args.get('roomId'),
    )
    out = []
    for tenant in tenants:
        data = tenant.to_dict()
        data['room'] = tenant.room.to_dict()
        data['payments'] = [p.to_dict() for p in tenant.recent_payments(limit=3)]
        out.append(data)
    return jsonify(out), 200

@tenants_bp.route('/tenants', methods=['POST'])
def create_tenant():
    data = json_body()
    tenant = tenant_service.create_tenant(data)
    return jsonify(tenant.to_dict()), 201

@tenants_bp.route('/tenants/<int:id>', methods=['GET'])
def get_tenant(id):
    tenant = tenant_service.get_tenant(id)
    data = tenant.to_dict()
    data['room'] = tenant.room.to_dict()
    data['payments'] = [p.to_dict() for p in tenant.recent_payments()]
    return jsonify(data), 200

@tenants_bp.route('/tenants/<int:id>', methods=['PUT'])
def update_tenant(id):
    data = json_body()
    tenant = tenant_service.update_tenant(id, data)
    return jsonify(tenant.to_dict()), 200

@tenants_bp.route('/tenants/<int:id>', methods=['DELETE'])
def delete_tenant(id):
    tenant_service.delete_tenant(id)
    return jsonify({'success': True}), 200
