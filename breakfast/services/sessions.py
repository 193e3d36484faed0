"""Staff session tokens.

A session token is a signed envelope over ``{"role": ..., "exp": <ms>}``.
The server keeps no session state: logout only clears the cookie, and a token
stays valid until ``exp``.
"""
import json
import math
from dataclasses import dataclass
from enum import Enum

from ..errors import InvalidToken
from .signer import SignedEnvelope, Signer

DEFAULT_SESSION_TTL_MS = 8 * 60 * 60 * 1000


class Role(str, Enum):
    RECEPTION = 'RECEPTION'
    RESTAURANT = 'RESTAURANT'
    VALIDATOR = 'VALIDATOR'

    @classmethod
    def parse(cls, value) -> 'Role | None':
        try:
            return cls(str(value or '').strip().upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class SessionTokenPayload:
    role: Role
    expires_at_ms: int


class SessionTokenService:
    def __init__(self, secret, ttl_ms: int = DEFAULT_SESSION_TTL_MS):
        self._signer = Signer(secret)
        self.ttl_ms = ttl_ms

    def issue(self, role: Role, now_ms: int, ttl_ms: int | None = None) -> str:
        role = Role(role)
        exp = now_ms + (self.ttl_ms if ttl_ms is None else ttl_ms)
        payload = json.dumps({'role': role.value, 'exp': exp}, separators=(',', ':')).encode('utf-8')
        return SignedEnvelope.seal(self._signer, payload).serialize()

    def verify(self, token: str, now_ms: int) -> SessionTokenPayload:
        envelope = SignedEnvelope.parse(token)
        if not envelope.verified_by(self._signer):
            raise InvalidToken()
        try:
            claims = json.loads(envelope.payload.decode('utf-8'))
        except (UnicodeDecodeError, ValueError):
            raise InvalidToken()
        if not isinstance(claims, dict):
            raise InvalidToken()

        role = claims.get('role')
        exp = claims.get('exp')
        if not isinstance(role, str) or role not in Role.__members__:
            raise InvalidToken()
        if isinstance(exp, bool) or not isinstance(exp, (int, float)) or not math.isfinite(exp):
            raise InvalidToken()
        if now_ms >= exp:
            raise InvalidToken('Session expired.')
        return SessionTokenPayload(Role(role), int(exp))


def set_session_cookie(response, name: str, token: str, max_age: int, secure: bool):
    response.set_cookie(
        name, token, max_age=max_age, path='/', httponly=True, samesite='Lax', secure=secure,
    )
    return response


def clear_session_cookie(response, name: str, secure: bool):
    response.set_cookie(name, '', max_age=0, path='/', httponly=True, samesite='Lax', secure=secure)
    return response
