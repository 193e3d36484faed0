from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func
import time, os, uuid


def _gen_bigint_id():
    """Generate a sortable 64-bit int: millis timestamp << 16 | 16 bits randomness."""
    return (int(time.time() * 1000) << 16) | int.from_bytes(os.urandom(2), 'big')


def _gen_guest_id():
    return uuid.uuid4().hex


db = SQLAlchemy()


class Guest(db.Model):
    id = db.Column(db.String(64), primary_key=True, default=_gen_guest_id)
    name = db.Column(db.String(255), nullable=False)
    room = db.Column(db.String(32), nullable=False, index=True)
    company = db.Column(db.String(255))
    check_in = db.Column(db.String(10))
    check_out = db.Column(db.String(10))
    tariff = db.Column(db.String(64))
    plan = db.Column(db.String(64))
    has_breakfast = db.Column(db.Boolean, nullable=False, default=False)
    consumption_date = db.Column(db.String(10))  # YYYY-MM-DD, hotel local date
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())


class AuditLog(db.Model):
    id = db.Column(db.BigInteger, primary_key=True, default=_gen_bigint_id)
    ts = db.Column(db.DateTime(timezone=True), server_default=func.now())
    actor_type = db.Column(db.String(32))
    actor_id = db.Column(db.String(64))
    event_type = db.Column(db.String(64))
    payload_json = db.Column(db.JSON)
