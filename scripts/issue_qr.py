import os
import sys
import requests

BASE_URL = os.environ.get('BASE_URL', 'http://localhost:5000')
GUEST_ID = os.environ.get('GUEST_ID') or (sys.argv[1] if len(sys.argv) > 1 else '')

if not GUEST_ID:
    print('Usage: issue_qr.py <GUEST_ID> (or GUEST_ID in env)')
    sys.exit(1)

payload = {'guestId': GUEST_ID}

# If WANT_PNG=1, request image directly
if os.environ.get('WANT_PNG', '0') == '1':
    r = requests.post(f"{BASE_URL}/api/issue-qr", headers={'Accept': 'image/png'}, json=payload, timeout=10)
    if r.status_code != 200:
        print('Error:', r.status_code, r.text)
        sys.exit(1)
    out = os.environ.get('OUT', 'qr.png')
    with open(out, 'wb') as f:
        f.write(r.content)
    print('PNG saved to', out)
    sys.exit(0)

# Default: JSON mode
r = requests.post(f"{BASE_URL}/api/issue-qr", json=payload, timeout=10)
if r.status_code != 200:
    print('Error:', r.status_code, r.text)
    if r.status_code == 429:
        print('Retry after', r.headers.get('Retry-After'), 's')
    sys.exit(1)
res = r.json()
print('token:', res['token'])
print('expires_at:', res['expires_at'])
