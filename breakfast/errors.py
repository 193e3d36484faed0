"""Error taxonomy shared by the token services, the guard and the HTTP layer.

Every error carries the HTTP status it maps to and a stable, machine readable
``code`` that ends up in the JSON body as ``error``.
"""
from typing import Optional


class BreakfastError(Exception):
    status_code = 500
    code = 'internal_error'
    message = 'Internal error.'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> dict:
        return {'ok': False, 'error': self.code, 'message': self.message}


class ConfigurationError(BreakfastError):
    status_code = 500
    code = 'configuration_error'
    message = 'Server is not configured.'


class ValidationError(BreakfastError, ValueError):
    status_code = 400
    code = 'invalid_request'
    message = 'Invalid request.'


class InvalidToken(BreakfastError):
    status_code = 400
    code = 'invalid_token'
    message = 'Invalid token.'


class TokenExpired(BreakfastError):
    status_code = 401
    code = 'token_expired'
    message = 'Token expired, generate a new code.'


class Unauthorized(BreakfastError):
    status_code = 401
    code = 'unauthorized'
    message = 'Invalid or expired session.'


class Forbidden(BreakfastError):
    status_code = 403
    code = 'forbidden'
    message = 'Role not allowed for this operation.'


class OutsideIssuanceWindow(BreakfastError):
    status_code = 403
    code = 'outside_window'


class RateLimited(BreakfastError):
    status_code = 429
    code = 'rate_limited'
    message = 'Too many requests, try again in a few seconds.'

    def __init__(self, retry_after_seconds: int, message: Optional[str] = None):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class NotConfirmed(BreakfastError):
    status_code = 400
    code = 'not_confirmed'
    message = 'Explicit confirmation is required to redeem.'


class NotFound(BreakfastError):
    status_code = 404
    code = 'not_found'
    message = 'Guest not found.'


class NotEntitled(BreakfastError):
    status_code = 400
    code = 'not_entitled'
    message = 'Guest has no breakfast entitlement.'


class AlreadyConsumed(BreakfastError):
    status_code = 409
    code = 'already_consumed'
    message = 'Breakfast already used today.'


class TransientConflict(BreakfastError):
    status_code = 409
    code = 'transient_conflict'
    message = 'Could not register the redemption right now, retry.'


class StoreError(BreakfastError):
    """The entitlement store failed (timeout, driver error, lost connection)."""
    status_code = 503
    code = 'store_unavailable'
    message = 'Guest directory unavailable.'
