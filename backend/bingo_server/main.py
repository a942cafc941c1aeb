from flask import Blueprint, request, jsonify, current_app
from bingo_server import get_registry
from bingo_server.auth import authenticate
from bingo_server.services.bingo.errors import AuthError

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the bingo server!'})

@main.route('/api/health')
def health():
    registry = get_registry()
    return jsonify({'status': 'ok', 'rooms': registry.room_count, 'users': registry.connection_count})

@main.route('/api/auth/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    try:
        token = authenticate(data.get('username'), data.get('password'))
    except AuthError as exc:
        current_app.logger.info("[auth] rejected login attempt")
        return jsonify({'success': False, 'message': exc.message}), 401
    return jsonify({'success': True, 'token': token, 'isAdmin': True})
