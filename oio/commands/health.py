"""oio health — API status (no login needed)."""

from oio import api
from oio.session import make_client


def cmd_health(args):
    data = api.health(make_client())
    print(f'Status: {data.get("status", "")}')
    print(f'Message: {data.get("message", "")}')
    print(f'Timestamp: {data.get("timestamp", "")}')
