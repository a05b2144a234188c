from flask import Blueprint, request, jsonify
from ..auth import load_session
from ..services import utility_consumption as utility_service
from ..services.fields import json_body, require, to_int

utility_bp = Blueprint('utility_consumption', __name__)
utility_bp.before_request(load_session)

@utility_bp.route('/utility-consumption', methods=['GET'])
def list_consumptions():
    room_id = utility_service.parse_room_filter(request.args.get('roomId'))
    records = utility_service.list_consumptions(room_id)
    return jsonify([r.to_dict() for r in records]), 200

@utility_bp.route('/utility-consumption', methods=['POST'])
def create_consumption():
    data = json_body()
    record = utility_service.create_consumption(data)
    return jsonify(record.to_dict()), 201

# Readings of the period before ?month=&year= for the room, used to prefill a new record
@utility_bp.route('/utility-consumption/previous', methods=['GET'])
def previous_consumption():
    args = request.args
    require(args, 'roomId', 'month', 'year')
    result = utility_service.previous_readings(
        to_int(args['roomId'], 'roomId'),
        to_int(args['month'], 'month'),
        to_int(args['year'], 'year'),
    )
    return jsonify(result), 200

@utility_bp.route('/utility-consumption/<int:id>', methods=['GET'])
def get_consumption(id):
    record = utility_service.get_consumption(id)
    return jsonify(record.to_dict()), 200

@utility_bp.route('/utility-consumption/<int:id>', methods=['PUT'])
def update_consumption(id):
    data = json_body()
    record = utility_service.update_consumption(id, data)
    return jsonify(record.to_dict()), 200

@utility_bp.route('/utility-consumption/<int:id>', methods=['DELETE'])
def delete_consumption(id):
    utility_service.delete_consumption(id)
    return jsonify({'message': 'Utility consumption record deleted successfully'}), 200
