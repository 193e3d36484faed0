from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from breakfast import create_app
from breakfast.config import Config
from breakfast.models import Guest, db
from breakfast.services.clock import Clock
from breakfast.services.rate_limit import MemoryRateLimitStore

SAO_PAULO = ZoneInfo('America/Sao_Paulo')


def local_ms(year, month, day, hour=0, minute=0, second=0):
    """Epoch millis of a Sao Paulo wall-clock time."""
    return int(datetime(year, month, day, hour, minute, second, tzinfo=SAO_PAULO).timestamp()) * 1000


class ManualTime:
    def __init__(self, now_ms):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms

    def advance(self, ms):
        self.now_ms += ms

    def set(self, now_ms):
        self.now_ms = now_ms


class UnitTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SESSION_SECRET = 'test-session-secret'
    QR_TOKEN_SECRET = 'test-qr-secret'
    AUTH_PASSWORD_RECEPTION = 'hotel'
    AUTH_PASSWORD_RESTAURANT = 'restaurant'
    AUTH_PASSWORD_VALIDATOR = 'validate'
    RATE_LIMIT_BACKEND = 'memory'
    AUTH_COOKIE_SECURE = None
    LOG_LEVEL = 'warning'


@pytest.fixture
def manual_time():
    # Monday 2026-10-19 08:30 in Sao Paulo, inside the issuance window
    return ManualTime(local_ms(2026, 10, 19, 8, 30))


@pytest.fixture
def clock(manual_time):
    return Clock('America/Sao_Paulo', now_ms_fn=manual_time)


@pytest.fixture
def rate_limit_store():
    return MemoryRateLimitStore()


@pytest.fixture
def app(clock, rate_limit_store):
    app = create_app(UnitTestConfig(), clock=clock, rate_limit_store=rate_limit_store)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def guests(app):
    rows = [
        Guest(id='g-entitled', name='Ana Souza', room='101', has_breakfast=True),
        Guest(id='g-roommate', name='Bruno Souza', room='101', has_breakfast=True),
        Guest(id='g-no-right', name='Carla Lima', room='102', has_breakfast=False),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return {row.id: row for row in rows}


def login(client, role='VALIDATOR', password='validate'):
    return client.post('/api/auth', json={'role': role, 'password': password})
