"""
Unit tests for guest QR redemption tokens.
"""

import json
import random

import pytest

from breakfast.errors import ConfigurationError, InvalidToken, TokenExpired, ValidationError
from breakfast.services.signer import SignedEnvelope, Signer
from breakfast.services.tokens import MAX_FUTURE_SKEW_MS, QR_TOKEN_TTL_MS, QrTokenService

NOW = 1_760_000_000_000
SECRET = 'qr-secret'


@pytest.fixture
def service():
    return QrTokenService(SECRET)


def _forge(payload: dict) -> str:
    raw = json.dumps(payload, ensure_ascii=False).encode('utf-8')
    return SignedEnvelope.seal(Signer(SECRET), raw).serialize()


class TestQrTokenService:
    """Test cases for QrTokenService."""

    def test_missing_secret(self):
        with pytest.raises(ConfigurationError):
            QrTokenService('')

    def test_roundtrip(self, service):
        token = service.issue('  guest-42 ', NOW)
        payload = service.verify(token, NOW)
        assert payload.guest_id == 'guest-42'
        assert payload.issued_at_ms == NOW

    @pytest.mark.parametrize('guest_id', ['', '   ', None, '\t\n'])
    def test_empty_guest_id_rejected(self, service, guest_id):
        with pytest.raises(ValidationError):
            service.issue(guest_id, NOW)

    def test_valid_until_ttl_then_expired(self, service):
        token = service.issue('g1', NOW)
        assert service.verify(token, NOW + QR_TOKEN_TTL_MS).guest_id == 'g1'
        with pytest.raises(TokenExpired):
            service.verify(token, NOW + QR_TOKEN_TTL_MS + 1)

    def test_ttl_is_thirty_minutes(self):
        assert QR_TOKEN_TTL_MS == 30 * 60 * 1000

    def test_future_skew_budget(self, service):
        assert service.verify(service.issue('g1', NOW + MAX_FUTURE_SKEW_MS), NOW).guest_id == 'g1'
        with pytest.raises(InvalidToken):
            service.verify(service.issue('g1', NOW + MAX_FUTURE_SKEW_MS + 1), NOW)

    def test_expired_is_distinct_from_invalid(self):
        assert not issubclass(TokenExpired, InvalidToken)
        assert not issubclass(InvalidToken, TokenExpired)

    def test_tampered_token_rejected(self, service):
        token = service.issue('g1', NOW)
        payload_b64, sig_b64 = token.split('.')
        other = service.issue('g2', NOW).split('.')[0]
        with pytest.raises(InvalidToken):
            service.verify(f'{other}.{sig_b64}', NOW)
        with pytest.raises(InvalidToken):
            service.verify(payload_b64 + '.' + sig_b64[::-1], NOW)

    def test_session_secret_does_not_sign_qr_tokens(self, service):
        token = QrTokenService('session-secret').issue('g1', NOW)
        with pytest.raises(InvalidToken):
            service.verify(token, NOW)

    @pytest.mark.parametrize('payload', [
        {'guestId': '', 'iat': NOW},
        {'guestId': '   ', 'iat': NOW},
        {'guestId': 12, 'iat': NOW},
        {'iat': NOW},
        {'guestId': 'g1'},
        {'guestId': 'g1', 'iat': str(NOW)},
        {'guestId': 'g1', 'iat': False},
    ])
    def test_bad_claims_rejected(self, service, payload):
        with pytest.raises(InvalidToken):
            service.verify(_forge(payload), NOW)

    def test_verify_trims_guest_id(self, service):
        assert service.verify(_forge({'guestId': ' g1 ', 'iat': NOW}), NOW).guest_id == 'g1'

    def test_verify_never_leaks_parse_errors(self, service):
        for token in (None, 42, '', '....', 'a.b', 'é.é', 'YQ.YQ'):
            with pytest.raises(InvalidToken):
                service.verify(token, NOW)

    def test_random_guest_ids_roundtrip(self, service):
        rng = random.Random(1234)
        pool = 'abcXYZ019 -_.áéçãõ日本語한국어🙂\t'
        for _ in range(1000):
            guest_id = ''.join(rng.choice(pool) for _ in range(rng.randint(0, 12)))
            if not guest_id.strip():
                with pytest.raises(ValidationError):
                    service.issue(guest_id, NOW)
                continue
            assert service.verify(service.issue(guest_id, NOW), NOW).guest_id == guest_id.strip()

    def test_expires_at(self, service):
        assert service.expires_at(NOW) == NOW + QR_TOKEN_TTL_MS
