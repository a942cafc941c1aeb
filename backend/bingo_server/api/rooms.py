from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from bingo_server import get_archiver

rooms = Blueprint('rooms', __name__)


@rooms.route('/history', methods=['GET'])
@login_required
def get_history():
    """Finished rooms, oldest first. Admin token required."""
    if not getattr(current_user, 'is_admin', False):
        return jsonify({'success': False, 'message': 'Admin access required'}), 403
    return jsonify({'success': True, 'rooms': get_archiver().list_records()})
