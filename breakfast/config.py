import os

from dotenv import load_dotenv

load_dotenv()

SECRETS_DIR = '/etc/secrets'


def _read_secret_file(name):
    # Secret Files mounted by the host (Render, Docker secrets)
    for path in (os.path.join(SECRETS_DIR, name), name):
        try:
            with open(path, 'r') as f:
                value = f.read().strip()
        except OSError:
            continue
        if value:
            return value
    return None


def _env_bool(name, default=None):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///breakfast.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAX_CONTENT_LENGTH = 64 * 1024

    SESSION_SECRET = os.environ.get('SESSION_SECRET', '')
    QR_TOKEN_SECRET = os.environ.get('QR_TOKEN_SECRET', '')

    AUTH_PASSWORD_RECEPTION = os.environ.get('AUTH_PASSWORD_RECEPTION', '')
    AUTH_PASSWORD_RESTAURANT = os.environ.get('AUTH_PASSWORD_RESTAURANT', '')
    AUTH_PASSWORD_VALIDATOR = os.environ.get('AUTH_PASSWORD_VALIDATOR', '')

    AUTH_COOKIE_NAME = 'breakfast_session'
    SESSION_TTL_SECONDS = int(os.environ.get('SESSION_TTL_SECONDS', str(8 * 60 * 60)))
    # None: follow request.is_secure
    AUTH_COOKIE_SECURE = _env_bool('AUTH_COOKIE_SECURE')

    QR_TOKEN_TTL_SECONDS = int(os.environ.get('QR_TOKEN_TTL_SECONDS', str(30 * 60)))
    QR_TOKEN_MAX_FUTURE_SKEW_SECONDS = 10

    TIMEZONE = os.environ.get('TIMEZONE', 'America/Sao_Paulo')

    RATE_LIMIT_BACKEND = os.environ.get('RATE_LIMIT_BACKEND', 'memory')
    REDIS_URL = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    AUTH_RATE_LIMIT_WINDOW_SECONDS = 60
    AUTH_RATE_LIMIT_MAX_REQUESTS = int(os.environ.get('AUTH_RATE_LIMIT_MAX_REQUESTS', '8'))
    ISSUE_RATE_LIMIT_WINDOW_SECONDS = 60
    ISSUE_RATE_LIMIT_MAX_REQUESTS = int(os.environ.get('ISSUE_RATE_LIMIT_MAX_REQUESTS', '30'))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'info')

    def __init__(self):
        # Optional fallbacks to support Secret Files
        if not self.SESSION_SECRET:
            self.SESSION_SECRET = _read_secret_file('session_secret') or ''
        if not self.QR_TOKEN_SECRET:
            self.QR_TOKEN_SECRET = _read_secret_file('qr_token_secret') or self.SESSION_SECRET
        for role in ('RECEPTION', 'RESTAURANT', 'VALIDATOR'):
            attr = f'AUTH_PASSWORD_{role}'
            if not getattr(self, attr):
                setattr(self, attr, _read_secret_file(f'auth_password_{role.lower()}') or '')
