from flask import Blueprint, request, jsonify
from ..auth import load_session
from ..services.fields import json_body
from ..services import rooms as room_service
from ..services.receipts import generate_receipt

rooms_bp = Blueprint('rooms', __name__)
rooms_bp.before_request(load_session)

@rooms_bp.route('/rooms', methods=['GET'])
def list_rooms():
    rooms = room_service.list_rooms(status=request.args.get('status'))
    out = []
    for room in rooms:
        data = room.to_dict()
        data['tenants'] = [t.to_dict() for t in room.active_tenants()]
        out.append(data)
    return jsonify(out), 200

@rooms_bp.route('/rooms', methods=['POST'])
def create_room():
    data = json_body()
    room = room_service.create_room(data)
    return jsonify(room.to_dict()), 201

@rooms_bp.route('/rooms/<int:id>', methods=['GET'])
def get_room(id):
    room = room_service.get_room(id)
    data = room.to_dict()
    tenants = []
    for tenant in room.tenants.all():
        t = tenant.to_dict()
        t['payments'] = [p.to_dict() for p in tenant.recent_payments(limit=5)]
        tenants.append(t)
    data['tenants'] = tenants
    return jsonify(data), 200

@rooms_bp.route('/rooms/<int:id>', methods=['PUT'])
def update_room(id):
    data = json_body()
    room = room_service.update_room(id, data)
    return jsonify(room.to_dict()), 200

@rooms_bp.route('/rooms/<int:id>', methods=['DELETE'])
def delete_room(id):
    room_service.delete_room(id)
    return jsonify({'success': True}), 200

@rooms_bp.route('/rooms/<int:id>/receipt', methods=['GET'])
def room_receipt(id):
    return jsonify(generate_receipt(id)), 200
