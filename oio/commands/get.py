"""
oio g — show an item or download it.

  oio g abc1              print text, or download a file / screenshot here
  oio g abc1 -o ~/dl      download into a directory
  oio g abc1 --url        print the presigned download URL only

The ID is looked up as a short, then a screenshot, then a Pro file.
"""

import os
from datetime import datetime, timezone

from oio import api
from oio.api import ok
from oio.errors import OioError
from oio.format import human_size
from oio.progress import ProgressBar
from oio.session import is_quiet, make_client, open_store
from oio.spinner import Spinner
from oio.ttl import format_expiry_time

_RULE = '=' * 60


def cmd_get(args):
    store = open_store()
    client = make_client(store)
    quiet = is_quiet(store)

    with Spinner('Fetching item...', quiet=quiet):
        kind, data = api.get_item(client, args.id)

    if kind == 'short':
        _show_short(args, data, quiet)
    elif kind == 'screenshot':
        _show_screenshot(args, data, quiet)
    else:
        _show_file(args, data, quiet)


# ── Per kind ──────────────────────────────────────────────────────────────────

def _show_short(args, data, quiet):
    item_type = data.get('type') or 'text'
    print(_RULE)
    print(f'ID: {args.id}')
    print(f'Type: {item_type.capitalize()}')
    if data.get('createdAt'):
        print(f'Created: {data["createdAt"]}')
    expires_at = data.get('expiresAt') or 0
    if expires_at:
        print(f'Expires: {format_expiry_time(expires_at)}')
        print(f'Expires At: {datetime.fromtimestamp(expires_at, timezone.utc).isoformat()}')
    print(_RULE)

    if item_type == 'file':
        print(f'Filename: {data.get("filename", "")}')
        print(f'Size: {human_size(data.get("fileSize") or 0)}')
        print(f'Content-Type: {data.get("contentType", "")}')
        print()
        _fetch(args, data.get('downloadUrl', ''), data.get('filename') or args.id,
               data.get('fileSize') or 0, quiet)
        return

    print()
    print(data.get('content', ''))


def _show_screenshot(args, data, quiet):
    print(_RULE)
    print(f'ID: {args.id}')
    print('Type: Screenshot')
    if data.get('expiresAt'):
        print(f'Expires: {format_expiry_time(data["expiresAt"])}')
    print(_RULE)
    print()
    _fetch(args, data.get('downloadUrl', ''), screenshot_filename(args.id, data.get('contentType', '')),
           data.get('size') or 0, quiet)


def _show_file(args, data, quiet):
    print(_RULE)
    print(f'ID: {args.id}')
    print('Type: File (Pro)')
    print(f'Filename: {data.get("filename", "")}')
    print(f'Size: {human_size(data.get("size") or 0)}')
    print(f'Content-Type: {data.get("contentType", "")}')
    if data.get('description'):
        print(f'Description: {data["description"]}')
    print(f'Expires: {format_expiry_time(data.get("expiresAt") or 0)}')
    print(_RULE)
    print()
    _fetch(args, data.get('downloadUrl', ''), data.get('filename') or args.id,
           data.get('size') or 0, quiet)


# ── Download ──────────────────────────────────────────────────────────────────

def screenshot_filename(item_id, content_type):
    ext = 'jpg' if 'jpeg' in content_type or 'jpg' in content_type else 'png'
    return f'screenshot-{item_id}.{ext}'


def _fetch(args, url, filename, size, quiet):
    if not url:
        raise OioError('the server did not return a download URL')

    if args.url:
        print('Download URL (valid for 1 hour):')
        print(url)
        return

    # Never let a server-supplied name escape the target directory.
    filename = os.path.basename(filename) or 'download'
    dest = os.path.join(args.output, filename) if args.output else filename

    bar = ProgressBar(size, label='downloading', quiet=quiet)
    try:
        written = api.download(url, dest, on_chunk=bar.update)
    except OioError as e:
        bar.clear()
        print('Download URL (valid for 1 hour):')
        print(url)
        raise OioError(f'download failed: {e}') from e
    bar.done('downloaded')
    ok(f'{dest} ({human_size(written)})')
