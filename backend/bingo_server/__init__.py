from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import logging
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _allowed_origins(config):
    raw = config.get('CORS_ORIGINS') or '*'
    if raw.strip() == '*':
        return '*'
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    allowed_origins = _allowed_origins(flask_app.config)
    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import models so the metadata knows about them before any table work
    import bingo_server.models  # noqa: F401
    from bingo_server.auth import init_auth
    from bingo_server.services.bingo.archive import HistoryArchiver
    from bingo_server.services.bingo.registry import SessionRegistry

    init_auth(flask_app)
    archiver = HistoryArchiver(flask_app)
    registry = SessionRegistry(
        archiver=archiver,
        reveal_lead_ms=flask_app.config.get('DRAW_REVEAL_LEAD_MS', 500),
    )
    flask_app.extensions['bingo'] = {'registry': registry, 'archiver': archiver}

    from bingo_server.main import main
    flask_app.register_blueprint(main)

    from bingo_server.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from bingo_server.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('history-reset')
    def history_reset_command():
        """Drops and recreates the finished-room history."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Room history has been reset!')

    flask_app.cli.add_command(history_reset_command)

    return flask_app


def get_registry(app=None):
    app = app or current_app
    return app.extensions['bingo']['registry']


def get_archiver(app=None):
    app = app or current_app
    return app.extensions['bingo']['archiver']


def shutdown_sessions(app) -> int:
    """Flush finished rooms to history and drop all live session state."""
    with app.app_context():
        archived = get_registry(app).shutdown()
        app.logger.info(f"[shutdown] flushed rooms={archived}")
        return archived
