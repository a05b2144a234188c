from flask import Blueprint, jsonify
from ..auth import current_session, load_session, login
from ..services.fields import json_body

auth_bp = Blueprint('auth', __name__)

@auth_bp.route('/auth/login', methods=['POST'])
def auth_login():
    data = json_body()
    result = login(data.get('username'), data.get('password'))
    if result is None:
        return jsonify({'error': 'Invalid username or password'}), 401
    token, session = result
    return jsonify({'accessToken': token, 'session': session.to_dict()}), 200

@auth_bp.route('/auth/session', methods=['GET'])
def auth_session():
    load_session()
    return jsonify(current_session().to_dict()), 200
