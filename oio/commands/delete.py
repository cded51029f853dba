"""
oio d — delete an item by ID.

  oio d abc1          asks for confirmation
  oio d abc1 -f       no confirmation
"""

from oio import api
from oio.api import ok
from oio.session import is_quiet, make_client, open_store
from oio.spinner import Spinner

_LABELS = {'short': 'item', 'screenshot': 'screenshot', 'file': 'file'}


def confirm(prompt) -> bool:
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in ('y', 'yes')


def cmd_delete(args):
    if not args.force and not confirm(f'Are you sure you want to delete item "{args.id}"? [y/N]: '):
        print('Deletion cancelled')
        return

    store = open_store()
    client = make_client(store)
    with Spinner('Deleting item...', quiet=is_quiet(store)):
        kind = api.delete_item(client, args.id)
    ok(f'Deleted {_LABELS.get(kind, "item")} "{args.id}"')
