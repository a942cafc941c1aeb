import os

from bingo_server import create_app, socketio, shutdown_sessions

app = create_app()

if __name__ == '__main__':
    try:
        socketio.run(app, host='0.0.0.0', port=int(os.environ.get('PORT', '3000')), debug=True)
    finally:
        # Persist finished rooms that were never explicitly closed
        shutdown_sessions(app)
