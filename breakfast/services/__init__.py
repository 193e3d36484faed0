from dataclasses import dataclass

from flask import current_app

from ..models import db
from .clock import Clock
from .guests import SqlEntitlementStore
from .rate_limit import RateLimiter
from .redeem import RedemptionGuard
from .sessions import SessionTokenService
from .tokens import QrTokenService


@dataclass
class Services:
    clock: Clock
    sessions: SessionTokenService
    qr_tokens: QrTokenService
    rate_limiter: RateLimiter


def build_services(config, clock: Clock, rate_limit_store) -> Services:
    """Wire the token services from explicit configuration. Raises ConfigurationError."""
    return Services(
        clock=clock,
        sessions=SessionTokenService(config.get('SESSION_SECRET'), ttl_ms=config['SESSION_TTL_SECONDS'] * 1000),
        qr_tokens=QrTokenService(
            config.get('QR_TOKEN_SECRET') or config.get('SESSION_SECRET'),
            ttl_ms=config['QR_TOKEN_TTL_SECONDS'] * 1000,
            max_future_skew_ms=config['QR_TOKEN_MAX_FUTURE_SKEW_SECONDS'] * 1000,
        ),
        rate_limiter=RateLimiter(rate_limit_store, clock),
    )


def services() -> Services:
    return current_app.extensions['breakfast']


def guest_store() -> SqlEntitlementStore:
    return SqlEntitlementStore(db.session)


def redemption_guard() -> RedemptionGuard:
    return RedemptionGuard(guest_store(), services().clock)
