"""
oio extend — push an item's expiry out, or make it permanent.

  oio extend abc1 --ttl 7d
  oio extend abc1 --permanent
"""

from oio import api
from oio.api import ok
from oio.session import make_client
from oio.ttl import format_expiry_time


def cmd_extend(args):
    client = make_client()
    expires_at = api.extend_item(client, args.id, ttl=args.ttl, permanent=args.permanent)
    if args.permanent:
        ok('Item is now permanent')
        print(f'\n  Item "{args.id}" will no longer expire.')
    else:
        ok('TTL extended')
        print(f'\n  Item "{args.id}" now expires {format_expiry_time(expires_at)}')
