import os
import sys
import random
import pytest

# Ensure the backend root (containing the `bingo_server` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from bingo_server import create_app, db, socketio, get_registry


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'admin123'
    ADMIN_PASSWORD_HASH = None
    BCRYPT_LOG_ROUNDS = 4
    WIN_CHECK_DELAY_MS = 0
    MAX_HISTORY_SIZE = 1000


class ScriptedRandom:
    """Stands in for the registry's RNG: replays scripted picks, then falls back."""

    def __init__(self, script=(), seed=0):
        self.script = list(script)
        self._fallback = random.Random(seed)

    def choice(self, seq):
        if self.script:
            value = self.script.pop(0)
            assert value in seq
            return value
        return self._fallback.choice(seq)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return get_registry(flask_app)


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients; all are disconnected at teardown."""
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        if test_client.is_connected():
            test_client.disconnect()


@pytest.fixture()
def admin(connect):
    sio = connect()
    sio.emit('admin:login', {'username': 'admin', 'password': 'admin123'})
    sio.get_received()
    return sio


def payloads(sio_client, name):
    """Drain the client's queue and return the payloads of one event type."""
    return [pkt['args'][0] for pkt in sio_client.get_received() if pkt['name'] == name]


def named(received, name):
    return [pkt['args'][0] for pkt in received if pkt['name'] == name]
