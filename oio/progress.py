"""
oio/progress.py

Terminal progress bar for multipart uploads and downloads.

Usage:
    bar = ProgressBar(total_bytes, label="uploading")
    bar.parts(done, total, bytes_done, bytes_total)   # upload callback
    bar.update(chunk_size)                            # download callback
    bar.done()
"""

import sys
import time

from oio.format import cyan, dim, green, human_size

_BAR_WIDTH = 30  # inner fill characters

# ANSI escape: carriage return + erase to end of line.
_CLEAR = '\r\033[K'


class ProgressBar:
    """
    Renders a progress bar to stderr like:
      uploading  [=============>        ]  62%  3/5 parts  6.2 MB/10.0 MB

    When stderr is not a tty, or `quiet` is set, all rendering is suppressed
    so no escape sequences or partial lines pollute the output.
    """

    def __init__(self, total: int, label: str = '', quiet: bool = False):
        self.total   = max(total, 1)
        self.label   = label
        self.done_   = 0
        self.part_info = ''
        self._start  = time.monotonic()
        self._tty    = sys.stderr.isatty() and not quiet
        self._render()

    # ── Public ────────────────────────────────────────────────────────────────

    def update(self, n: int):
        self.done_ = min(self.done_ + n, self.total)
        self._render()

    def parts(self, parts_done, parts_total, bytes_done, bytes_total):
        """Matches MultipartUploader's on_progress signature."""
        self.total = max(bytes_total, 1)
        self.done_ = min(bytes_done, self.total)
        self.part_info = f'{parts_done}/{parts_total} parts'
        self._render()

    def done(self, msg: str = ''):
        self.done_ = self.total
        if not self._tty:
            return
        elapsed = time.monotonic() - self._start
        speed   = self.total / elapsed if elapsed > 0 else 0
        tick = green('✓', stream=sys.stderr)
        sys.stderr.write(
            f'{_CLEAR}  {tick} {msg or self.label}  {human_size(self.total)}  '
            f'({human_size(speed)}/s  {elapsed:.1f}s)\n'
        )
        sys.stderr.flush()

    def clear(self):
        if self._tty:
            sys.stderr.write(_CLEAR)
            sys.stderr.flush()

    # ── Internal ──────────────────────────────────────────────────────────────

    def _render(self):
        if not self._tty:
            return

        pct    = self.done_ / self.total
        filled = int(pct * _BAR_WIDTH)
        arrow  = '>' if filled < _BAR_WIDTH else ''
        fill   = '=' * filled + arrow
        empty  = ' ' * (_BAR_WIDTH - filled - len(arrow))

        bar = dim('[', stream=sys.stderr) + cyan(fill, stream=sys.stderr) + empty + dim(']', stream=sys.stderr)
        parts = f'  {self.part_info}' if self.part_info else ''

        line = (
            f'\r  {self.label:<12} {bar} '
            f'{int(pct * 100):>3}%{parts}  '
            f'{human_size(self.done_)}/{human_size(self.total)}'
        )
        sys.stderr.write(line)
        sys.stderr.flush()
