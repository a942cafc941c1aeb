"""Admin authentication: credential check, bearer tokens and Flask-Login glue."""
import hmac

from flask import current_app, jsonify, request
from flask_login import UserMixin
from itsdangerous import BadSignature, URLSafeTimedSerializer

from bingo_server import bcrypt, login_manager
from bingo_server.services.bingo.errors import AuthError, InvalidToken

TOKEN_SALT = 'bingo-admin-token'


class AdminUser(UserMixin):
    def __init__(self, username, is_admin=True):
        self.id = username
        self.username = username
        self.is_admin = is_admin

    def to_dict(self):
        return {'username': self.username, 'isAdmin': self.is_admin}


def init_auth(app) -> None:
    """Hash the configured admin password once, unless a hash is supplied."""
    if not app.config.get('ADMIN_PASSWORD_HASH'):
        hashed = bcrypt.generate_password_hash(app.config['ADMIN_PASSWORD'])
        app.config['ADMIN_PASSWORD_HASH'] = hashed.decode('utf-8')


def check_admin_credentials(username, password) -> bool:
    cfg = current_app.config
    if not isinstance(username, str) or not isinstance(password, str):
        return False
    if not hmac.compare_digest(username.encode('utf-8'), cfg['ADMIN_USERNAME'].encode('utf-8')):
        return False
    return bcrypt.check_password_hash(cfg['ADMIN_PASSWORD_HASH'], password)


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def authenticate(username, password) -> str:
    if not check_admin_credentials(username, password):
        raise AuthError()
    return _serializer().dumps({'username': username, 'isAdmin': True})


def verify_token(token) -> dict:
    if not token:
        raise InvalidToken('No token provided')
    try:
        claims = _serializer().loads(token, max_age=int(current_app.config.get('TOKEN_TTL_SEC', 86400)))
    except BadSignature:
        raise InvalidToken()
    if not isinstance(claims, dict) or 'username' not in claims:
        raise InvalidToken()
    return claims


def _bearer_token():
    header = request.headers.get('Authorization', '')
    parts = header.split(' ', 1)
    if len(parts) == 2 and parts[0].lower() == 'bearer':
        return parts[1].strip()
    return None


@login_manager.request_loader
def load_user_from_request(req):
    try:
        claims = verify_token(_bearer_token())
    except InvalidToken:
        return None
    return AdminUser(claims['username'], is_admin=bool(claims.get('isAdmin')))


@login_manager.unauthorized_handler
def unauthorized():
    message = 'Invalid token' if _bearer_token() else 'No token provided'
    return jsonify({'success': False, 'message': message}), 401
