from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import (AlreadyConsumed, NotConfirmed, NotEntitled, NotFound, StoreError,
                      TransientConflict)
from ..logging_config import get_logger
from .clock import Clock
from .guests import EntitlementRecord

logger = get_logger(__name__)


class RedemptionOutcome(str, Enum):
    SUCCESS = 'success'
    NOT_CONFIRMED = 'not_confirmed'
    NOT_FOUND = 'not_found'
    NOT_ENTITLED = 'not_entitled'
    ALREADY_CONSUMED = 'already_consumed'
    TRANSIENT_CONFLICT = 'transient_conflict'


_ERRORS = {
    RedemptionOutcome.NOT_CONFIRMED: NotConfirmed,
    RedemptionOutcome.NOT_FOUND: NotFound,
    RedemptionOutcome.NOT_ENTITLED: NotEntitled,
    RedemptionOutcome.ALREADY_CONSUMED: AlreadyConsumed,
    RedemptionOutcome.TRANSIENT_CONFLICT: TransientConflict,
}


@dataclass(frozen=True)
class RedemptionResult:
    outcome: RedemptionOutcome
    guest: Optional[EntitlementRecord] = None

    @property
    def ok(self) -> bool:
        return self.outcome is RedemptionOutcome.SUCCESS

    def error(self):
        """The error matching a failed outcome, for callers that report over HTTP."""
        return _ERRORS[self.outcome]()


class RedemptionGuard:
    """Consumes a guest's breakfast for today at most once.

    Losing a race is an expected outcome and is reported, never raised.
    """

    def __init__(self, store, clock: Clock):
        self.store = store
        self.clock = clock

    def redeem(self, guest_id: str, confirmed, now_ms: Optional[int] = None,
               actor: Optional[str] = None) -> RedemptionResult:
        if confirmed is not True:
            return self._result(guest_id, RedemptionOutcome.NOT_CONFIRMED)

        today = self.clock.today(now_ms)
        try:
            updated = self.store.consume_if_available(guest_id, today, actor=actor)
            if updated is not None:
                return self._result(guest_id, RedemptionOutcome.SUCCESS, updated)
            current = self.store.get(guest_id)
        except StoreError as exc:
            logger.warning('redeem.store_error', guest_id=guest_id, error=exc.message)
            return self._result(guest_id, RedemptionOutcome.TRANSIENT_CONFLICT)

        if current is None:
            return self._result(guest_id, RedemptionOutcome.NOT_FOUND)
        if not current.has_breakfast:
            return self._result(guest_id, RedemptionOutcome.NOT_ENTITLED, current)
        if current.used_on(today):
            return self._result(guest_id, RedemptionOutcome.ALREADY_CONSUMED, current)
        return self._result(guest_id, RedemptionOutcome.TRANSIENT_CONFLICT, current)

    def _result(self, guest_id, outcome, guest=None):
        logger.info('redeem.outcome', guest_id=guest_id, outcome=outcome.value)
        return RedemptionResult(outcome, guest)
