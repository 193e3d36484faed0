"""
Unit tests for staff session tokens.
"""

import json

import pytest

from breakfast.errors import ConfigurationError, InvalidToken
from breakfast.services.sessions import (DEFAULT_SESSION_TTL_MS, Role, SessionTokenService)
from breakfast.services.signer import SignedEnvelope, Signer, b64url_encode

NOW = 1_760_000_000_000
SECRET = 'session-secret'


@pytest.fixture
def service():
    return SessionTokenService(SECRET)


def _forge(payload: dict, secret=SECRET) -> str:
    return SignedEnvelope.seal(Signer(secret), json.dumps(payload).encode()).serialize()


class TestSessionTokenService:
    """Test cases for SessionTokenService."""

    def test_missing_secret(self):
        with pytest.raises(ConfigurationError):
            SessionTokenService('')

    @pytest.mark.parametrize('role', list(Role))
    @pytest.mark.parametrize('ttl', [1, 60_000, DEFAULT_SESSION_TTL_MS])
    def test_roundtrip(self, service, role, ttl):
        token = service.issue(role, NOW, ttl)
        payload = service.verify(token, NOW)
        assert payload.role is role
        assert payload.expires_at_ms == NOW + ttl

    def test_default_ttl_is_eight_hours(self, service):
        payload = service.verify(service.issue(Role.RECEPTION, NOW), NOW)
        assert payload.expires_at_ms - NOW == 8 * 60 * 60 * 1000

    def test_expiry_boundary_is_exclusive(self, service):
        token = service.issue(Role.VALIDATOR, NOW, 1000)
        assert service.verify(token, NOW + 999).role is Role.VALIDATOR
        with pytest.raises(InvalidToken):
            service.verify(token, NOW + 1000)

    def test_single_character_mutation_is_rejected(self, service):
        token = service.issue(Role.RESTAURANT, NOW)
        alphabet = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_'
        for i, ch in enumerate(token):
            if ch == '.':
                continue
            replacement = alphabet[(alphabet.index(ch) + 1) % len(alphabet)]
            mutated = token[:i] + replacement + token[i + 1:]
            with pytest.raises(InvalidToken):
                service.verify(mutated, NOW)

    def test_other_secret_rejected(self, service):
        token = SessionTokenService('other').issue(Role.RECEPTION, NOW)
        with pytest.raises(InvalidToken):
            service.verify(token, NOW)

    def test_extra_segment_rejected(self, service):
        token = service.issue(Role.RECEPTION, NOW)
        with pytest.raises(InvalidToken):
            service.verify(token + '.extra', NOW)
        with pytest.raises(InvalidToken):
            service.verify(token.replace('.', ''), NOW)

    @pytest.mark.parametrize('payload', [
        {'role': 'ADMIN', 'exp': NOW + 1000},
        {'role': 'reception', 'exp': NOW + 1000},
        {'role': None, 'exp': NOW + 1000},
        {'role': 'RECEPTION'},
        {'role': 'RECEPTION', 'exp': '9999999999999'},
        {'role': 'RECEPTION', 'exp': True},
        {'role': 'RECEPTION', 'exp': None},
    ])
    def test_bad_claims_rejected(self, service, payload):
        with pytest.raises(InvalidToken):
            service.verify(_forge(payload), NOW)

    def test_non_finite_expiry_rejected(self, service):
        raw = b'{"role":"RECEPTION","exp":Infinity}'
        token = SignedEnvelope.seal(Signer(SECRET), raw).serialize()
        with pytest.raises(InvalidToken):
            service.verify(token, NOW)

    def test_non_json_payload_rejected(self, service):
        for raw in (b'not json', b'\xff\xfe', b'[1,2]', b'"RECEPTION"'):
            token = SignedEnvelope.seal(Signer(SECRET), raw).serialize()
            with pytest.raises(InvalidToken):
                service.verify(token, NOW)

    def test_unsigned_payload_rejected(self, service):
        payload = b64url_encode(json.dumps({'role': 'RECEPTION', 'exp': NOW + 1000}).encode())
        with pytest.raises(InvalidToken):
            service.verify(payload + '.' + b64url_encode(b'x' * 32), NOW)


class TestRole:
    """Test cases for Role parsing."""

    def test_parse_normalizes_case_and_whitespace(self):
        assert Role.parse(' validator ') is Role.VALIDATOR

    def test_parse_unknown(self):
        assert Role.parse('GUEST') is None
        assert Role.parse(None) is None
