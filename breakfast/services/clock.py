import time
from collections import namedtuple
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

# weekday: 0=Sunday .. 6=Saturday
CivilTime = namedtuple('CivilTime', ['weekday', 'hour', 'minute'])


def _system_now_ms() -> int:
    return time.time_ns() // 1_000_000


class Clock:
    """Current instant plus its civil decomposition in one fixed timezone."""

    def __init__(self, tz_name: str = 'America/Sao_Paulo', now_ms_fn=None):
        self.tz = ZoneInfo(tz_name)
        self._now_ms_fn = now_ms_fn or _system_now_ms

    def now_ms(self) -> int:
        return int(self._now_ms_fn())

    def local(self, now_ms: int | None = None) -> datetime:
        if now_ms is None:
            now_ms = self.now_ms()
        return datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc).astimezone(self.tz)

    def civil(self, now_ms: int | None = None) -> CivilTime:
        dt = self.local(now_ms)
        return CivilTime(dt.isoweekday() % 7, dt.hour, dt.minute)

    def today(self, now_ms: int | None = None) -> str:
        return self.local(now_ms).strftime('%Y-%m-%d')
