"""
Item API calls: add (text, screenshot, file), list, extend, health, download.

Endpoints:
  POST  /shorts                 text item            ttl as integer seconds
  POST  /screenshots            base64 image         ttl as "{N}s"
  POST  /shorts/file/init       multipart plan       ttl as "{N}s"
  POST  /shorts/file/complete   sorted part ETags
  GET   /shorts | /screenshots | /files              listings
  PATCH /shorts/<id>            extend or make permanent
  GET   /health                 no auth
"""

import base64
import logging
import os
from concurrent.futures import ThreadPoolExecutor

import requests

from oio.ttl import TTL_STRING, parse_ttl, ttl_body_value
from oio.upload import MultipartUploader, UploadPlan, get_mime_type
from oio.errors import (
    ApiError, InvalidTTL, NotFound, OioError, ProRequired, TransportError,
)

logger = logging.getLogger(__name__)

MAX_TEXT_BYTES = 360 * 1024
MAX_FILE_BYTES = 150 * 1024 * 1024
MAX_FILE_TTL_SECS = 7 * 24 * 3600
DEFAULT_TTL = '24h'
DOWNLOAD_CHUNK = 256 * 1024


def calculate_ttl(ttl_text=None, permanent=False, is_file=False) -> int:
    """
    Seconds to send as the item TTL; 0 means permanent (no ttl field).
    Unparsable input falls back to 24h; file TTLs are capped at 7 days.
    """
    if permanent:
        return 0
    try:
        seconds = parse_ttl(ttl_text or DEFAULT_TTL)
    except InvalidTTL:
        logger.warning('Invalid TTL %r, using %s', ttl_text, DEFAULT_TTL)
        seconds = 24 * 3600
    if is_file and seconds > MAX_FILE_TTL_SECS:
        logger.warning('TTL capped at 7 days (168h) for file items')
        seconds = MAX_FILE_TTL_SECS
    return seconds


# ── Add ───────────────────────────────────────────────────────────────────────

def add_text(client, content: str, ttl_seconds: int = 0) -> dict:
    """Create a text short. Returns {'shortId', 'expiresAt'}."""
    size = len(content.encode('utf-8'))
    if size > MAX_TEXT_BYTES:
        raise OioError(
            f'content exceeds maximum size of {MAX_TEXT_BYTES // 1024}KB '
            f'(current: {size / 1024:.2f}KB)'
        )

    body = {'content': content}
    if ttl_seconds > 0:
        body['ttl'] = ttl_body_value(ttl_seconds)

    res = client.post('/shorts', body)
    if res.status_code == 201:
        return {'shortId': res.get_string('shortId'), 'expiresAt': res.get_int('expiresAt')}
    if res.status_code == 413:
        raise ApiError(f'content too large: {res.message()}', status_code=413)
    raise ApiError(f'failed to create item: {res.message()}', status_code=res.status_code)


def add_screenshot(client, image: bytes, ttl_seconds: int = 0,
                   content_type='image/png') -> dict:
    """
    Upload image bytes as a screenshot item.
    Returns {'screenshotId', 'expiresAt', 'downloadUrl'}; downloadUrl is ''
    when the follow-up lookup fails.
    """
    body = {
        'contentType': content_type,
        'data': base64.b64encode(image).decode('ascii'),
        'ttl': ttl_body_value(ttl_seconds, TTL_STRING) if ttl_seconds > 0 else DEFAULT_TTL,
    }

    res = client.post('/screenshots', body)
    if res.status_code == 413:
        raise ApiError(f'image too large: {res.message()}', status_code=413)
    if res.status_code != 201:
        raise ApiError(f'failed to upload image: {res.message()}', status_code=res.status_code)

    result = {
        'screenshotId': res.get_string('screenshotId'),
        'expiresAt': res.get_int('expiresAt'),
        'downloadUrl': '',
    }
    try:
        url_res = client.get(f'/screenshots/{result["screenshotId"]}')
    except OioError as e:
        logger.warning('Could not fetch screenshot URL: %s', e)
        return result
    if url_res.status_code == 200:
        result['downloadUrl'] = url_res.get_string('downloadUrl')
    return result


def add_file(client, path, ttl_seconds: int = 0, on_progress=None, uploader=None) -> dict:
    """
    Upload a file through init → multipart parts → complete.
    Returns {'shortId', 'expiresAt', 'parts'}.
    """
    size = os.path.getsize(path)
    if size == 0:
        raise OioError('cannot upload empty file')
    if size > MAX_FILE_BYTES:
        from oio.format import human_size
        raise OioError(f'file too large. Maximum size is 150MB, file is {human_size(size)}')

    filename = os.path.basename(path)
    with open(path, 'rb') as f:
        data = f.read()

    init_body = {
        'filename': filename,
        'contentType': get_mime_type(path),
        'fileSize': size,
    }
    if ttl_seconds > 0:
        init_body['ttl'] = ttl_body_value(ttl_seconds, TTL_STRING)

    res = client.post('/shorts/file/init', init_body)
    if res.status_code != 201:
        raise ApiError(f'failed to initialize upload: {res.message()}', status_code=res.status_code)
    try:
        init = res.json()
    except ValueError as e:
        raise ApiError(f'invalid init response: {e}') from e
    if not isinstance(init, dict):
        raise ApiError('invalid init response: expected a JSON object')

    short_id = init.get('shortId', '')
    try:
        plan = UploadPlan.from_init_response(init, size)
    except (KeyError, TypeError, ValueError) as e:
        raise ApiError(f'invalid init response: bad upload plan ({e!r})') from e
    logger.info('Upload %s initialized: %d parts of %d bytes', short_id, len(plan.parts), plan.part_size)

    parts = (uploader or MultipartUploader()).upload(plan, data, on_progress)

    done = client.post('/shorts/file/complete', {
        'shortId': short_id,
        'parts': [p.to_dict() for p in parts],
    })
    if done.status_code != 200:
        raise ApiError(f'failed to complete upload: {done.message()}', status_code=done.status_code)

    return {'shortId': short_id, 'expiresAt': init.get('expiresAt') or 0, 'parts': len(parts)}


# ── List ──────────────────────────────────────────────────────────────────────

class Item:
    """One row of `oio ls`, normalised across the three collections."""

    def __init__(self, id, type, source, preview='', filename='', size=0,
                 expires_at=0, created_at=''):
        self.id = id
        self.type = type            # text | file | screenshot | profile
        self.source = source        # short | screenshot | file
        self.preview = preview
        self.filename = filename
        self.size = size
        self.expires_at = expires_at
        self.created_at = created_at

    def to_dict(self) -> dict:
        d = {
            'id': self.id,
            'type': self.type,
            'size': self.size,
            'expiresAt': self.expires_at,
            'createdAt': self.created_at,
            'source': self.source,
        }
        if self.preview:
            d['preview'] = self.preview
        if self.filename:
            d['filename'] = self.filename
        return d

    def __repr__(self):
        return f'Item({self.id!r}, {self.type!r})'


def _shorts(data):
    items = []
    for s in data.get('shorts') or []:
        content = s.get('content') or ''
        items.append(Item(
            id=s.get('shortId') or s.get('id', ''),
            type='file' if s.get('type') == 'file' else 'text',
            source='short',
            preview=s.get('contentPreview') or content,
            filename=s.get('filename', ''),
            size=s.get('fileSize') or len(content),
            expires_at=s.get('expiresAt') or 0,
            created_at=s.get('createdAt', ''),
        ))
    return items


def _screenshots(data):
    items = []
    for sc in data.get('screenshots') or []:
        sid = sc.get('screenshotId') or sc.get('id', '')
        items.append(Item(
            id=sid,
            type='screenshot',
            source='screenshot',
            filename=sc.get('filename') or f'screenshot-{sid}',
            size=sc.get('size') or 0,
            expires_at=sc.get('expiresAt') or 0,
            created_at=sc.get('createdAt', ''),
        ))
    return items


def _files(data):
    items = []
    for f in data.get('files') or []:
        items.append(Item(
            id=f.get('fileId') or f.get('id', ''),
            type='profile',
            source='file',
            filename=f.get('filename', ''),
            size=f.get('size') or 0,
            expires_at=f.get('expiresAt') or 0,
            created_at=f.get('createdAt', ''),
        ))
    return items


_SOURCES = (
    ('/shorts', _shorts),
    ('/screenshots', _screenshots),
    ('/files', _files),
)


def _fetch(client, path, parse):
    try:
        res = client.get(path)
    except OioError as e:
        logger.warning('Listing %s failed: %s', path, e)
        return []
    if res.status_code != 200:
        logger.debug('Listing %s returned %s', path, res.status_code)
        return []
    try:
        data = res.json()
    except ValueError:
        return []
    return parse(data) if isinstance(data, dict) else []


def list_items(client) -> list:
    """All items from the three collections, fetched in parallel."""
    with ThreadPoolExecutor(max_workers=len(_SOURCES)) as pool:
        futures = [pool.submit(_fetch, client, path, parse) for path, parse in _SOURCES]
        results = [f.result() for f in futures]
    return [item for batch in results for item in batch]


# `oio ls -t` names → Item.type
TYPE_FILTERS = {
    'text': 'text',
    'file': 'file',
    'screenshot': 'screenshot',
    'pro': 'profile',
}


def filter_items(items, type=None, search=None) -> list:
    if type:
        wanted = TYPE_FILTERS.get(type.lower())
        if wanted is None:
            raise OioError(
                f'invalid type: {type}. Valid types: {", ".join(TYPE_FILTERS)}'
            )
        items = [i for i in items if i.type == wanted]
    if search:
        needle = search.lower()
        items = [
            i for i in items
            if needle in i.preview.lower() or needle in i.filename.lower()
            or needle in i.id.lower()
        ]
    return items


def sort_items(items, by='date') -> list:
    """date: newest first · size: largest first · expiry: soonest first, permanent last."""
    if by == 'size':
        return sorted(items, key=lambda i: i.size, reverse=True)
    if by == 'expiry':
        return sorted(items, key=lambda i: (i.expires_at == 0, i.expires_at))
    return sorted(items, key=lambda i: i.created_at, reverse=True)


# ── Extend / health / download ────────────────────────────────────────────────

def extend_item(client, item_id, ttl=None, permanent=False) -> int:
    """
    Push an item's expiry out to `ttl` from now, or remove it. Returns the
    new expiresAt (0 for permanent).
    """
    if not ttl and not permanent:
        raise OioError('please specify either --ttl <duration> or --permanent')
    if ttl and permanent:
        raise OioError('cannot use both --ttl and --permanent together')

    body = {'permanent': True} if permanent else {'ttl': ttl}
    res = client.patch(f'/shorts/{item_id}', body)

    if res.status_code == 200:
        return res.get_int('expiresAt')
    if res.status_code == 404:
        raise NotFound(item_id)
    if res.status_code == 403:
        raise ProRequired('extending files requires a Pro subscription')
    if res.status_code == 400:
        raise ApiError(f'invalid TTL format: {res.message()}', status_code=400)
    raise ApiError(f'failed to extend TTL: {res.message()}', status_code=res.status_code)


def health(client) -> dict:
    res = client.get_no_auth('/health')
    if res.status_code != 200:
        raise ApiError(f'health check failed with status {res.status_code}', status_code=res.status_code)
    try:
        data = res.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def download(url, dest, http=None, on_chunk=None) -> int:
    """
    Stream a presigned URL to `dest`. Returns bytes written.
    A file left half-written by a failed download is removed.
    """
    http = http or requests
    try:
        with http.get(url, stream=True, timeout=None) as res:
            if res.status_code != 200:
                raise ApiError(f'download failed with status {res.status_code}',
                               status_code=res.status_code)
            return _save(res, dest, on_chunk)
    except requests.RequestException as e:
        raise TransportError.from_exception(e, url) from e


def _save(res, dest, on_chunk):
    try:
        out = open(dest, 'wb')
    except OSError as e:
        raise OioError(f'cannot write {dest}: {e}') from e

    written = 0
    try:
        with out:
            for chunk in res.iter_content(chunk_size=DOWNLOAD_CHUNK):
                if chunk:
                    out.write(chunk)
                    written += len(chunk)
                    if on_chunk:
                        on_chunk(len(chunk))
    # RequestException subclasses OSError.
    except requests.RequestException:
        _discard(dest)
        raise
    except OSError as e:
        _discard(dest)
        raise OioError(f'cannot write {dest}: {e}') from e
    except BaseException:
        _discard(dest)
        raise
    return written


def _discard(path):
    try:
        os.remove(path)
    except OSError as e:
        logger.debug('Could not remove partial download %s: %s', path, e)
