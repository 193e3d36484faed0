#!/usr/bin/env python3
import sys, json, time, pathlib

# Usage: python scripts/check_token.py <TOKEN> <QR_TOKEN_SECRET>
# Verifies a guest QR token offline: signature, claims and age

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from breakfast.errors import BreakfastError
from breakfast.services.signer import SignedEnvelope
from breakfast.services.tokens import QrTokenService


def err(msg):
    print(f"ERROR: {msg}")
    sys.exit(1)

if len(sys.argv) < 3:
    err("Usage: check_token.py <TOKEN> <QR_TOKEN_SECRET>")

token = sys.argv[1].strip()
secret = sys.argv[2].strip()
now_ms = int(time.time() * 1000)

try:
    envelope = SignedEnvelope.parse(token)
    claims = json.loads(envelope.payload.decode('utf-8'))
except (BreakfastError, ValueError) as e:
    err(f"decode: {e}")

service = QrTokenService(secret)
try:
    service.verify(token, now_ms)
    status = 'valid'
except BreakfastError as e:
    status = e.code

iat = claims.get('iat') if isinstance(claims, dict) else None
print({
    'claims': claims,
    'status': status,
    'age_s': (now_ms - iat) // 1000 if isinstance(iat, int) else None,
    'expires_at': service.expires_at(iat) if isinstance(iat, int) else None,
})
