"""
Item lookup by bare ID: get, delete, share.

IDs carry no type tag, so each operation probes the collections in a
fixed order — short, then screenshot, then Pro file — and stops at the
first answer that is not a 404:

  404      → keep probing
  403      → stop, ProRequired (the item exists but needs Pro)
  anything else → stop; the operation decides what the status means

All three 404 → NotFound. Transport errors stop the probe immediately.
"""

import logging

from oio.ttl import parse_ttl
from oio.errors import ApiError, InvalidTTL, NotFound, ProRequired

logger = logging.getLogger(__name__)

SHORT = 'short'
SCREENSHOT = 'screenshot'
PRO_FILE = 'file'

# First match wins, so the order is observable.
PROBE_ORDER = (
    (SHORT,      '/shorts'),
    (SCREENSHOT, '/screenshots'),
    (PRO_FILE,   '/files'),
)

DEFAULT_SHARE_EXPIRY_DAYS = 1


class Resolution:
    """Which collection answered, and its response."""

    def __init__(self, kind, response):
        self.kind = kind
        self.response = response

    def __repr__(self):
        return f'Resolution({self.kind!r}, {self.response!r})'


def resolve(client, item_id, method='GET', suffix='', body=None, kinds=None) -> Resolution:
    """
    Probe each collection with `method` on `<collection>/<id><suffix>`.
    `kinds` narrows the probe to those collections, order unchanged.
    Raises NotFound or ProRequired.
    """
    for kind, base in PROBE_ORDER:
        if kinds is not None and kind not in kinds:
            continue
        res = client.request(f'{base}/{item_id}{suffix}', method, body=body)
        if res.status_code == 404:
            logger.debug('%s %s: not a %s', method, item_id, kind)
            continue
        if res.status_code == 403:
            raise ProRequired(res.message('this item requires a Pro subscription'))
        return Resolution(kind, res)
    raise NotFound(item_id)


# ── Operations ────────────────────────────────────────────────────────────────

def get_item(client, item_id) -> tuple[str, dict]:
    """
    Fetch item metadata. Returns (kind, data); `data` is the JSON body
    (for screenshots and files it includes a downloadUrl).
    """
    found = resolve(client, item_id)
    if found.response.status_code != 200:
        raise _unexpected(found.response, 'failed to fetch item')
    try:
        data = found.response.json()
    except ValueError as e:
        raise ApiError(f'invalid response for item {item_id}: {e}') from e
    return found.kind, data


def delete_item(client, item_id) -> str:
    """Delete by ID. Returns the kind that was deleted."""
    found = resolve(client, item_id, method='DELETE')
    if found.response.status_code not in (200, 204):
        raise _unexpected(found.response, 'failed to delete item')
    return found.kind


def share_item(client, item_id, public=False, password='', expires='',
               title='', description='', kind=None) -> dict:
    """
    Create a share link. Returns the share record with `shareUrl` filled in
    from `url` when the server only sends the latter.

    Pass `kind` when the caller already knows the collection (right after
    an add) to skip probing the others.
    """
    body = build_share_body(public, password, expires, title, description)
    found = resolve(client, item_id, method='POST', suffix='/share', body=body,
                    kinds=(kind,) if kind else None)
    res = found.response
    if res.status_code not in (200, 201):
        raise _unexpected(res, 'failed to create share')

    try:
        data = res.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    if not data.get('shareUrl') and data.get('url'):
        data['shareUrl'] = data['url']
    data['kind'] = found.kind
    return data


def build_share_body(public=False, password='', expires='', title='', description='') -> dict:
    body = {'isPublic': public or not password}
    if password:
        body['password'] = password
        body['isPublic'] = False
    days = parse_expires_to_days(expires)
    if days > 0:
        body['expiresInDays'] = days
    if title:
        body['title'] = title
    if description:
        body['description'] = description
    return body


def parse_expires_to_days(text: str) -> int:
    """'' → 1, '7d' → 7, '36h' → 2 (rounded up), garbage → 1."""
    if not text:
        return DEFAULT_SHARE_EXPIRY_DAYS
    if text.endswith('d') and text[:-1].isascii() and text[:-1].isdigit():
        return int(text[:-1])
    try:
        seconds = parse_ttl(text)
    except InvalidTTL:
        return DEFAULT_SHARE_EXPIRY_DAYS
    return max(1, -(-seconds // 86400))


def _unexpected(res, prefix):
    msg = res.message()
    if res.status_code >= 500:
        msg = f'{msg} (server error {res.status_code})' if msg else f'server error (status {res.status_code})'
    elif not msg:
        msg = f'status {res.status_code}: {res.text[:200]}'
    return ApiError(f'{prefix}: {msg}', status_code=res.status_code)
