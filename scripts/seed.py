import os, time, sys, pathlib
# Ensure project root is on PYTHONPATH when running directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from breakfast import create_app
from breakfast.models import db, Guest
from breakfast.services import services

app = create_app()
with app.app_context():
    demo = [
        Guest(id='demo-101-a', name='Ana Souza', room='101', company='Acme', tariff='BAR', plan='BB', has_breakfast=True),
        Guest(id='demo-101-b', name='Bruno Souza', room='101', company='Acme', tariff='BAR', plan='BB', has_breakfast=True),
        Guest(id='demo-102-a', name='Carla Lima', room='102', tariff='RO', plan='RO', has_breakfast=False),
    ]
    for guest in demo:
        db.session.merge(guest)
    db.session.commit()

    svc = services()
    token = svc.qr_tokens.issue('demo-101-a', int(time.time() * 1000))
    print('Seeded', len(demo), 'guests')
    print('QR token for demo-101-a:', token)
    print('Room lookup:', os.environ.get('BASE_URL', 'http://localhost:5000') + '/api/guests?room=101')
