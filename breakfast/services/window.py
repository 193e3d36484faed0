from .clock import Clock

SUNDAY = 0
OPENING_MINUTES_SUNDAY = 7 * 60
OPENING_MINUTES = 6 * 60
CLOSING_MINUTES = 10 * 60  # inclusive

ISSUANCE_WINDOW_MESSAGE = (
    'QR codes can only be generated during breakfast hours: Monday to Saturday '
    'from 06:00 to 10:00 and on Sundays from 07:00 to 10:00 (hotel local time).'
)


def is_issuance_allowed(now_ms: int, clock: Clock) -> bool:
    weekday, hour, minute = clock.civil(now_ms)
    current = hour * 60 + minute
    opening = OPENING_MINUTES_SUNDAY if weekday == SUNDAY else OPENING_MINUTES
    return opening <= current <= CLOSING_MINUTES
