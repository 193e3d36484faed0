import hmac

from flask import Blueprint, current_app, jsonify, request

from .auth import client_ip, cookie_secure, current_session
from .errors import ConfigurationError, Unauthorized, ValidationError
from .logging_config import get_logger
from .services import services
from .services.sessions import Role, clear_session_cookie, set_session_cookie

bp = Blueprint('auth', __name__)
logger = get_logger(__name__)


def _role_password(role: Role) -> str:
    return current_app.config.get(f'AUTH_PASSWORD_{role.value}') or ''


@bp.post('/auth')
def login():
    svc = services()
    cfg = current_app.config
    svc.rate_limiter.enforce(
        client_ip(), 'auth',
        cfg['AUTH_RATE_LIMIT_WINDOW_SECONDS'] * 1000, cfg['AUTH_RATE_LIMIT_MAX_REQUESTS'],
        message='Too many login attempts, try again in a few seconds.',
    )

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError()
    role = Role.parse(data.get('role'))
    if role is None:
        raise ValidationError('Invalid role.')
    password = str(data.get('password') or '')

    expected = _role_password(role)
    if not expected:
        raise ConfigurationError(f'Password for role {role.value} is not configured.')
    if not hmac.compare_digest(password.encode('utf-8'), expected.encode('utf-8')):
        logger.info('auth.login_failed', role=role.value, client=client_ip())
        raise Unauthorized('Wrong password.')

    ttl_seconds = cfg['SESSION_TTL_SECONDS']
    token = svc.sessions.issue(role, svc.clock.now_ms(), ttl_seconds * 1000)
    logger.info('auth.login', role=role.value, client=client_ip())
    resp = jsonify({'ok': True, 'role': role.value})
    return set_session_cookie(resp, cfg['AUTH_COOKIE_NAME'], token, ttl_seconds, cookie_secure())


@bp.post('/logout')
def logout():
    resp = jsonify({'ok': True})
    return clear_session_cookie(resp, current_app.config['AUTH_COOKIE_NAME'], cookie_secure())


@bp.get('/me')
def me():
    session = current_session()
    if session is None:
        return jsonify({'authenticated': False})
    return jsonify({'authenticated': True, 'role': session.role.value, 'expires_at': session.expires_at_ms})
