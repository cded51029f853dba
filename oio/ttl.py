"""
TTL strings: "30s", "60m", "24h", "7d".

parse_ttl() is strict: digits then exactly one unit letter, nothing else,
value > 0 and no more than a year in that unit. is_valid_ttl() is the cheap
shape-only check used when validating config values.
"""

import re
import time
from datetime import datetime

from oio.errors import InvalidTTL

_TTL_RE = re.compile(r'^(\d+)([smhd])$', re.ASCII)

# unit → (seconds per unit, ceiling in that unit, unit name)
_UNITS = {
    's': (1,     31_536_000, 'seconds'),
    'm': (60,    525_600,    'minutes'),
    'h': (3600,  8_760,      'hours'),
    'd': (86400, 365,        'days'),
}

# Request bodies take either form depending on the endpoint.
TTL_SECONDS = 'seconds'
TTL_STRING = 'string'


def parse_ttl(text: str) -> int:
    """'3h' → 10800. Raises InvalidTTL."""
    m = _TTL_RE.fullmatch(text or '')
    if not m:
        raise InvalidTTL()

    value = int(m.group(1))
    if value <= 0:
        raise InvalidTTL('TTL value must be greater than 0')

    per_unit, ceiling, name = _UNITS[m.group(2)]
    if value > ceiling:
        raise InvalidTTL(
            f'TTL in {name} cannot exceed 1 year ({ceiling}{m.group(2)})'
        )
    return value * per_unit


def is_valid_ttl(text: str) -> bool:
    """Shape check only — '0s' and '400d' pass here."""
    return bool(text) and _TTL_RE.fullmatch(text) is not None


def seconds_to_ttl(seconds: int) -> str:
    if seconds < 60:
        return f'{seconds}s'
    if seconds < 3600:
        return f'{seconds // 60}m'
    if seconds < 86400:
        return f'{seconds // 3600}h'
    return f'{seconds // 86400}d'


def ttl_body_value(seconds: int, style: str = TTL_SECONDS):
    """Integer seconds for /shorts, "{N}s" for /screenshots and file init."""
    if style == TTL_STRING:
        return f'{seconds}s'
    return seconds


def format_expiry(expires_at: int, now: float | None = None) -> str:
    """Short remaining time: '45s', '12m', '3h', '6d'."""
    if not expires_at:
        return 'unknown'
    now = int(time.time() if now is None else now)
    remaining = expires_at - now
    if remaining < 0:
        return 'expired'
    return seconds_to_ttl(remaining)


def format_expiry_time(expires_at: int, now: float | None = None) -> str:
    """Long form: 'in 3 days (Jan 2, 2026)', 'in 1 hour', 'never (permanent)'."""
    if not expires_at:
        return 'never (permanent)'
    now = time.time() if now is None else now
    diff = expires_at - now
    if diff <= 0:
        return 'expired'

    days = int(diff // 86400)
    hours = int(diff // 3600) % 24
    minutes = int(diff // 60) % 60

    if days > 0:
        date = datetime.fromtimestamp(expires_at)
        return f'in {days} day{_plural(days)} ({date:%b} {date.day}, {date.year})'
    if hours > 0:
        return f'in {hours} hour{_plural(hours)}'
    if minutes > 0:
        return f'in {minutes} minute{_plural(minutes)}'
    seconds = int(diff)
    return f'in {seconds} second{_plural(seconds)}'


def _plural(n):
    return '' if n == 1 else 's'
