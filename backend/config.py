import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///bingo.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Single admin account; ADMIN_PASSWORD_HASH (bcrypt) takes precedence over ADMIN_PASSWORD
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'admin123')
    ADMIN_PASSWORD_HASH = os.environ.get('ADMIN_PASSWORD_HASH')
    # Bearer token lifetime (seconds)
    TOKEN_TTL_SEC = int(os.environ.get('TOKEN_TTL_SEC', '86400'))
    # Draw timing (milliseconds): client reveal lead and server-side win-check delay
    DRAW_REVEAL_LEAD_MS = int(os.environ.get('DRAW_REVEAL_LEAD_MS', '500'))
    WIN_CHECK_DELAY_MS = int(os.environ.get('WIN_CHECK_DELAY_MS', '1500'))
    # Finished-room history caps
    MAX_HISTORY_SIZE = int(os.environ.get('MAX_HISTORY_SIZE', '1000'))
    MAX_HISTORY_BYTES = int(os.environ.get('MAX_HISTORY_BYTES', str(100 * 1024 * 1024)))
    # Comma-separated list, or * for any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
