"""
oio/spinner.py

Lightweight terminal spinner. Runs in a background thread so the calling
thread is never blocked.

Usage:
    with Spinner("Fetching items..."):
        result = slow_network_call()

The spinner is suppressed when stderr is not a TTY or when the user set
`quiet`, so it never pollutes pipes or logs.
"""

import sys
import threading

from oio.format import dim

_FRAMES = ['⣾', '⣽', '⣻', '⢿', '⡿', '⣟', '⣯', '⣷']
_INTERVAL = 0.1  # seconds per frame

# Carriage return + erase to end of line
_CLEAR = '\r\033[K'


def _tty_ok() -> bool:
    """Only spin when stderr is an interactive terminal."""
    return sys.stderr.isatty()


class Spinner:
    """
    Context-manager spinner that runs on a daemon thread.

    On stop/exit it erases itself completely, so the caller prints its real
    output on a clean line.
    """

    def __init__(self, label: str = '', quiet: bool = False):
        self._label    = label
        self._quiet    = quiet
        self._thread   = None
        self._stop_evt = threading.Event()

    # ── Context manager ───────────────────────────────────────────────────────

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *_):
        self.stop()

    # ── Manual control ────────────────────────────────────────────────────────

    def start(self):
        if self._quiet or not _tty_ok():
            return
        self._stop_evt.clear()
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self):
        if self._thread is None:
            return
        self._stop_evt.set()
        self._thread.join()
        self._thread = None
        sys.stderr.write(_CLEAR)
        sys.stderr.flush()

    # ── Worker ────────────────────────────────────────────────────────────────

    def _spin(self):
        frames = [dim(f, stream=sys.stderr) for f in _FRAMES]
        i = 0
        while not self._stop_evt.wait(timeout=_INTERVAL):
            frame = frames[i % len(frames)]
            label = f'  {frame}  {self._label}' if self._label else f'  {frame}'
            sys.stderr.write(f'{_CLEAR}{label}')
            sys.stderr.flush()
            i += 1
