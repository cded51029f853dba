"""
oio sh — create a share link (Pro).

  oio sh abc1                    public link, expires in 1 day
  oio p abc1                     same, as a shortcut
  oio sh abc1 --password x       password-protected link
  oio sh abc1 --expires 7d       link valid for 7 days
  oio sh abc1 --title "Q3" --desc "numbers"
"""

from oio import api
from oio.errors import NotFound, ProRequired
from oio.format import local_time
from oio.session import is_quiet, make_client, open_store
from oio.spinner import Spinner


def cmd_share(args):
    store = open_store()
    client = make_client(store)

    try:
        with Spinner('Creating share link...', quiet=is_quiet(store)):
            share = api.share_item(
                client, args.id,
                public=args.public, password=args.password or '',
                expires=args.expires or '',
                title=args.title or '', description=args.desc or '',
            )
    except ProRequired as e:
        raise ProRequired('sharing requires a Pro subscription') from e
    except NotFound as e:
        raise NotFound(
            args.id,
            f'no shareable item found with ID "{args.id}". '
            'Sharing is available for Pro files, screenshots and shorts',
        ) from e

    print_share(share)


def print_share(share: dict):
    print('Share created!')
    print()
    if share.get('shareId'):
        print(f'Share ID: {share["shareId"]}')
    if share.get('title'):
        print(f'Title: {share["title"]}')
    if share.get('description'):
        print(f'Description: {share["description"]}')
    print(f'Type: {"Public" if share.get("isPublic") else "Password Protected"}')
    if share.get('expiresAt'):
        print(f'Expires: {local_time(share["expiresAt"])}')
    print()
    print('Share URL:')
    print(share.get('shareUrl', ''))
