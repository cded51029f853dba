"""
Formatting helpers: human-readable sizes, table cells, and minimal ANSI color.

Color is on only when the underlying stream is a real TTY. NO_COLOR turns
it off unconditionally; FORCE_COLOR turns it on for terminals that don't
report isatty() correctly (some tmux, screen, VS Code, SSH setups).
"""

import math
import os
import sys
from datetime import datetime, timezone as tz


# ── Human-readable sizes and times ────────────────────────────────────────────

def human_size(n):
    """1234567 → '1.2 MB'.  0 → '0 B'."""
    if not n:
        return '0 B'
    units = ['B', 'KB', 'MB', 'GB']
    i = int(math.floor(math.log(max(n, 1), 1024)))
    i = min(i, len(units) - 1)
    val = n / (1024 ** i)
    if i == 0:
        return f'{val:.0f} B'
    return f'{val:.1f} {units[i]}'


def local_time(ts):
    """Unix seconds or datetime → 'Jan 2, 2026 3:04 PM' in local time."""
    dt = ts if isinstance(ts, datetime) else datetime.fromtimestamp(ts, tz.utc)
    dt = dt.astimezone()
    hour = dt.hour % 12 or 12
    return f'{dt:%b} {dt.day}, {dt.year} {hour}:{dt:%M} {dt:%p}'


def truncate(text, length):
    if not text or len(text) <= length:
        return text or ''
    if length <= 3:
        return text[:length]
    return text[:length - 3] + '...'


def one_line(text):
    return text.replace('\r\n', ' ').replace('\r', ' ').replace('\n', ' ')


# ── ANSI color ─────────────────────────────────────────────────────────────────
#
# Priority:
#   NO_COLOR env var → always off
#   FORCE_COLOR env var → always on
#   Normal → underlying fd is a real TTY

def _ansi_on(stream=None) -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    target = stream if stream is not None else sys.stdout
    try:
        return os.isatty(target.fileno())
    except (AttributeError, OSError, ValueError):
        return getattr(target, 'isatty', lambda: False)()


def _c(code: str, text: str, stream=None) -> str:
    if _ansi_on(stream):
        return f'\033[{code}m{text}\033[0m'
    return text


# ── Color palette ─────────────────────────────────────────────────────────────

def green(text, stream=None):  return _c('1;32', text, stream)   # bold green
def red(text, stream=None):    return _c('1;31', text, stream)   # bold red
def dim(text, stream=None):    return _c('2',    text, stream)   # faint/dim
def cyan(text, stream=None):   return _c('1;36', text, stream)   # bold cyan
def yellow(text, stream=None): return _c('1;33', text, stream)   # bold yellow
