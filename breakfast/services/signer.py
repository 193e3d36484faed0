"""HMAC-SHA256 signing and the ``payload.signature`` wire envelope.

Both halves of an envelope are unpadded base64url. Parsing is strict: exactly
one ``.``, both halves non-empty, and both halves must be the canonical
encoding of the bytes they decode to, so no two strings map to the same token.
"""
import base64
import hashlib
import hmac
import re
from dataclasses import dataclass

from ..errors import ConfigurationError, InvalidToken

_B64URL = re.compile(r'^[A-Za-z0-9_-]+$')


def b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b'=').decode('ascii')


def b64url_decode(segment: str) -> bytes:
    if not segment or not _B64URL.match(segment) or len(segment) % 4 == 1:
        raise ValueError('not base64url')
    raw = base64.urlsafe_b64decode(segment + '=' * (-len(segment) % 4))
    if b64url_encode(raw) != segment:
        raise ValueError('non-canonical base64url')
    return raw


class Signer:
    def __init__(self, secret):
        if not secret:
            raise ConfigurationError('Signing secret is not configured.')
        self._key = secret.encode('utf-8') if isinstance(secret, str) else bytes(secret)

    def sign(self, payload: bytes) -> bytes:
        return hmac.new(self._key, payload, hashlib.sha256).digest()

    def verify(self, payload: bytes, signature: bytes) -> bool:
        try:
            expected = self.sign(payload)
        except (TypeError, ValueError):
            return False
        if not isinstance(signature, (bytes, bytearray)) or len(signature) != len(expected):
            return False
        return hmac.compare_digest(expected, bytes(signature))


@dataclass(frozen=True)
class SignedEnvelope:
    payload: bytes
    signature: bytes

    @classmethod
    def seal(cls, signer: Signer, payload: bytes) -> 'SignedEnvelope':
        return cls(payload, signer.sign(payload))

    @classmethod
    def parse(cls, token) -> 'SignedEnvelope':
        if not isinstance(token, str) or token.count('.') != 1:
            raise InvalidToken()
        payload_b64, signature_b64 = token.split('.')
        try:
            return cls(b64url_decode(payload_b64), b64url_decode(signature_b64))
        except ValueError:
            raise InvalidToken()

    def verified_by(self, signer: Signer) -> bool:
        return signer.verify(self.payload, self.signature)

    def serialize(self) -> str:
        return f'{b64url_encode(self.payload)}.{b64url_encode(self.signature)}'
