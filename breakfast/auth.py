from functools import wraps

from flask import current_app, g, request

from .errors import Forbidden, InvalidToken, Unauthorized
from .services import services
from .services.sessions import Role


def current_session():
    """The verified staff session from the request cookie, or None."""
    token = request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])
    if not token:
        return None
    svc = services()
    try:
        return svc.sessions.verify(token, svc.clock.now_ms())
    except InvalidToken:
        return None


def require_role(*roles):
    allowed = {Role(r) for r in roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            session = current_session()
            if session is None:
                raise Unauthorized()
            if session.role not in allowed:
                raise Forbidden()
            g.staff_session = session
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def cookie_secure() -> bool:
    override = current_app.config.get('AUTH_COOKIE_SECURE')
    return request.is_secure if override is None else bool(override)


def client_ip() -> str:
    # ProxyFix already resolved X-Forwarded-For
    return request.remote_addr or 'unknown'
