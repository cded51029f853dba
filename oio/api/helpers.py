"""
Small utilities shared across CLI command modules.
"""

import sys


def err(msg):
    """Print a formatted error to stderr."""
    from oio.format import red
    print(f'  {red("✗", stream=sys.stderr)} {msg}', file=sys.stderr)


def ok(msg):
    """Print a formatted success message."""
    from oio.format import green
    print(f'  {green("✓")} {msg}')


def warn(msg):
    from oio.format import yellow
    print(f'  {yellow("⚠", stream=sys.stderr)} {msg}', file=sys.stderr)
