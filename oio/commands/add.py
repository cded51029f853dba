"""
oio a — add text, a file, or an image.

  oio a "hello"                   text item
  echo "hello" | oio a            text from stdin
  oio a report.pdf                file upload (multipart, max 150MB)
  oio a shot.png --screenshot     image as a screenshot item
  oio a notes.txt --ttl 7d        custom TTL (files are capped at 7d)
  oio a "hello" --permanent       no expiry
  oio a report.pdf -p --title Q3  add, then create a share link
"""

import os
import sys

from oio import api
from oio.api import ok, warn
from oio.errors import OioError
from oio.format import human_size
from oio.progress import ProgressBar
from oio.session import is_quiet, make_client, open_store
from oio.spinner import Spinner
from oio.ttl import format_expiry_time
from oio.upload import get_mime_type


def cmd_add(args):
    store = open_store()
    client = make_client(store)
    quiet = is_quiet(store)
    ttl_text = args.ttl or store.preference('default_ttl') or None

    target = args.input
    if target is None or target == '-':
        if sys.stdin.isatty():
            raise OioError('no input. Provide text, a file path, or pipe via stdin')
        target = sys.stdin.read()
        kind, item_id = _add_text(client, target, ttl_text, args, quiet)
    elif args.screenshot:
        kind, item_id = _add_image(client, target, ttl_text, args, quiet)
    elif os.path.isfile(target):
        kind, item_id = _add_file(client, target, ttl_text, args, quiet)
    else:
        kind, item_id = _add_text(client, target, ttl_text, args, quiet)

    if args.public or args.password:
        from oio.commands.share import print_share
        with Spinner('Creating share...', quiet=quiet):
            share = api.share_item(
                client, item_id,
                public=args.public, password=args.password or '',
                title=args.title or '', description=args.desc or '',
                kind=kind,
            )
        print()
        print_share(share)


# ── Text ──────────────────────────────────────────────────────────────────────

def _add_text(client, content, ttl_text, args, quiet):
    if not content:
        raise OioError('nothing to add: input is empty')
    ttl = api.calculate_ttl(ttl_text, permanent=args.permanent)
    with Spinner('Creating item...', quiet=quiet):
        result = api.add_text(client, content, ttl)
    ok('Item created')
    _print_result(result['shortId'], result['expiresAt'])
    return 'short', result['shortId']


# ── Image ─────────────────────────────────────────────────────────────────────

def _add_image(client, path, ttl_text, args, quiet):
    if not os.path.isfile(path):
        raise OioError(f'no such image file: {path}')
    content_type = get_mime_type(path)
    if not content_type.startswith('image/'):
        raise OioError(f'{os.path.basename(path)} is not an image ({content_type})')

    with open(path, 'rb') as f:
        image = f.read()

    ttl = api.calculate_ttl(ttl_text, permanent=args.permanent, is_file=True)
    with Spinner('Uploading image...', quiet=quiet):
        result = api.add_screenshot(client, image, ttl, content_type=content_type)

    ok('Image uploaded')
    print(f'  ID:      {result["screenshotId"]}')
    if result['downloadUrl']:
        print(f'  URL:     {result["downloadUrl"]}')
    else:
        warn(f'Could not fetch the download URL. Try: oio g {result["screenshotId"]} --url')
    if result['expiresAt']:
        print(f'  Expires: {format_expiry_time(result["expiresAt"])}')
    return 'screenshot', result['screenshotId']


# ── File ──────────────────────────────────────────────────────────────────────

def _add_file(client, path, ttl_text, args, quiet):
    size = os.path.getsize(path)
    print(f'  File: {os.path.basename(path)}')
    print(f'  Size: {human_size(size)}')
    print(f'  Type: {get_mime_type(path)}')

    ttl = api.calculate_ttl(ttl_text, permanent=args.permanent, is_file=True)
    bar = ProgressBar(size, label='uploading', quiet=quiet)
    try:
        result = api.add_file(client, path, ttl, on_progress=bar.parts)
    except OioError:
        bar.clear()
        raise
    bar.done(f'uploaded {result["parts"]} parts')

    ok('Upload complete')
    _print_result(result['shortId'], result['expiresAt'])
    return 'short', result['shortId']


def _print_result(item_id, expires_at):
    print(f'  ID:      {item_id}')
    if expires_at:
        print(f'  Expires: {format_expiry_time(expires_at)}')
    else:
        print('  Expires: never (permanent)')
