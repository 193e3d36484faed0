import json
import math
from dataclasses import dataclass

from ..errors import InvalidToken, TokenExpired, ValidationError
from .signer import SignedEnvelope, Signer

QR_TOKEN_TTL_MS = 30 * 60 * 1000
MAX_FUTURE_SKEW_MS = 10 * 1000


@dataclass(frozen=True)
class QrTokenPayload:
    guest_id: str
    issued_at_ms: int


class QrTokenService:
    """Guest-scoped redemption tokens encoded into the QR code.

    The service only checks what was signed at issuance time. Whether the
    guest can still redeem is decided by the redemption guard.
    """

    def __init__(self, secret, ttl_ms: int = QR_TOKEN_TTL_MS, max_future_skew_ms: int = MAX_FUTURE_SKEW_MS):
        self._signer = Signer(secret)
        self.ttl_ms = ttl_ms
        self.max_future_skew_ms = max_future_skew_ms

    def issue(self, guest_id, now_ms: int) -> str:
        guest_id = str(guest_id or '').strip()
        if not guest_id:
            raise ValidationError('guestId is required to issue a token.')
        try:
            payload = json.dumps(
                {'guestId': guest_id, 'iat': now_ms}, separators=(',', ':'), ensure_ascii=False,
            ).encode('utf-8')
        except UnicodeEncodeError:
            raise ValidationError('guestId is not valid text.')
        return SignedEnvelope.seal(self._signer, payload).serialize()

    def verify(self, token: str, now_ms: int) -> QrTokenPayload:
        envelope = SignedEnvelope.parse(token)
        if not envelope.verified_by(self._signer):
            raise InvalidToken()
        try:
            claims = json.loads(envelope.payload.decode('utf-8'))
        except (UnicodeDecodeError, ValueError):
            raise InvalidToken()
        if not isinstance(claims, dict):
            raise InvalidToken()

        guest_id = claims.get('guestId')
        iat = claims.get('iat')
        if not isinstance(guest_id, str) or not guest_id.strip():
            raise InvalidToken()
        if isinstance(iat, bool) or not isinstance(iat, (int, float)) or not math.isfinite(iat):
            raise InvalidToken()

        if iat > now_ms + self.max_future_skew_ms:
            raise InvalidToken()
        if now_ms - iat > self.ttl_ms:
            raise TokenExpired()
        return QrTokenPayload(guest_id.strip(), int(iat))

    def expires_at(self, issued_at_ms: int) -> int:
        return issued_at_ms + self.ttl_ms
