"""
oio ls — list items.

  oio ls                     every item, newest first
  oio ls -t text             only text items (text, file, screenshot, pro)
  oio ls -s invoice          search id, preview and filename
  oio ls -l 5 --sort size    five largest
  oio ls --raw | jq '.[]'    JSON for scripting
"""

import json

from oio import api
from oio.format import human_size, one_line, truncate
from oio.session import is_quiet, make_client, open_store
from oio.spinner import Spinner
from oio.ttl import format_expiry

_TAGS = {'text': '[T]', 'file': '[F]', 'screenshot': '[S]', 'profile': '[P]'}
_HEADER = ('ID', 'Type', 'Content / Filename', 'Size', 'Expires')
_CONTENT_WIDTH = 38


def cmd_ls(args):
    store = open_store()
    client = make_client(store)

    with Spinner('Fetching items...', quiet=is_quiet(store)):
        items = api.list_items(client)

    items = api.filter_items(items, type=args.type, search=args.search)
    items = api.sort_items(items, by=args.sort)

    total = len(items)
    if args.limit:
        items = items[:args.limit]

    if args.raw:
        print(json.dumps([i.to_dict() for i in items], indent=2))
        return

    print()
    print_table(items)
    print()
    print(summary(items, total))

    filters = []
    if args.type:
        filters.append(f'type={args.type}')
    if args.search:
        filters.append(f'search="{args.search}"')
    if args.sort and args.sort != 'date':
        filters.append(f'sort={args.sort}')
    if filters:
        print(f'Filters: {", ".join(filters)}')
    print('\nLegend: [T]=Text [F]=File [S]=Screenshot [P]=Pro File')


# ── Rendering ─────────────────────────────────────────────────────────────────

def row(item) -> tuple:
    if item.type == 'text':
        content = one_line(item.preview)
    elif item.type in _TAGS:
        content = item.filename
    else:
        content = item.preview or item.filename
    return (
        item.id,
        _TAGS.get(item.type, '[?]'),
        truncate(content, _CONTENT_WIDTH),
        human_size(item.size) if item.size else '',
        format_expiry(item.expires_at) if item.expires_at else 'perm',
    )


def print_table(items):
    if not items:
        print('No items found.')
        return
    rows = [_HEADER] + [row(i) for i in items]
    widths = [max(len(r[c]) for r in rows) for c in range(len(_HEADER))]
    for n, r in enumerate(rows):
        print('  '.join(cell.ljust(w) for cell, w in zip(r, widths)).rstrip())
        if n == 0:
            print('  '.join('-' * w for w in widths))


def summary(items, total_before_limit) -> str:
    counts = []
    for type_, label in (('text', 'text'), ('file', 'file'),
                         ('screenshot', 'screenshot'), ('profile', 'pro file')):
        n = sum(1 for i in items if i.type == type_)
        if n:
            counts.append(f'{n} {label}')
    shown = ''
    if total_before_limit > len(items):
        shown = f' (showing {len(items)} of {total_before_limit})'
    return f'Total: {len(items)} items ({", ".join(counts) or "none"}){shown}'
