"""
Authenticated request executor.

Every API call goes through ApiClient.request():

  1. resolve the base URL from the credential store
  2. if auth is required, make sure the ID token is usable — refresh it
     once (blocking) when it is inside the expiry buffer
  3. send one request with a JSON body and a bearer header
  4. hand back a Response for any HTTP status

No retries here. A 404 or 500 is a normal Response; only a failed
exchange (no response at all) raises, as TransportError.

Concurrent callers may each see an expired token and each refresh; the
last write to the store wins. There is no lock around the refresh.
"""

import json
import logging

import requests

from oio.config import DEFAULT_BASE_URL
from oio.tokens import is_expired
from oio.errors import (
    AuthExpired, NotAuthenticated, NotConfigured, OioError, TransportError,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECS = 60


class Response:
    """Status, headers, and raw body of a completed exchange."""

    def __init__(self, status_code, headers=None, body=b''):
        self.status_code = status_code
        self.headers = headers if headers is not None else {}
        self.body = body or b''

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')

    def json(self):
        """Decoded body. Raises ValueError if the body is not JSON."""
        return json.loads(self.body)

    def _object(self) -> dict:
        try:
            data = self.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def get_string(self, key) -> str:
        """String field of a JSON object body, '' if missing or not a string."""
        v = self._object().get(key)
        return v if isinstance(v, str) else ''

    def get_int(self, key) -> int:
        """Integer field of a JSON object body, 0 if missing or not a number."""
        v = self._object().get(key)
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return 0
        return int(v)

    def message(self, default='') -> str:
        """Server-supplied error text: 'message', then 'error'."""
        return self.get_string('message') or self.get_string('error') or default

    def __repr__(self):
        return f'<Response [{self.status_code}]>'


class ApiClient:
    """
    Executes API requests against the base URL held in `store`.

    store      credential store: get() → CredentialSet | None
    refresher  token refresh collaborator: refresh(refresh_token) → TokenSet.
               It persists the new tokens itself.
    """

    def __init__(self, store, refresher=None, session=None, timeout=REQUEST_TIMEOUT_SECS):
        self.store = store
        self.session = session or requests.Session()
        self.timeout = timeout
        if refresher is None:
            from .auth import TokenRefresher
            refresher = TokenRefresher(store)
        self.refresher = refresher

    # ── Core ──────────────────────────────────────────────────────────────────

    def request(self, path, method='GET', body=None, headers=None, require_auth=True) -> Response:
        creds = self.store.get()

        if creds is not None and creds.base_url:
            base_url = creds.base_url.rstrip('/')
        elif require_auth:
            raise NotConfigured()
        else:
            base_url = DEFAULT_BASE_URL

        token = self._valid_token(creds) if require_auth else ''

        req_headers = {'Content-Type': 'application/json'}
        req_headers.update(headers or {})
        if token:
            req_headers['Authorization'] = f'Bearer {token}'

        data = json.dumps(body) if body is not None else None
        url = base_url + path

        logger.debug('%s %s', method, url)
        try:
            res = self.session.request(
                method, url, data=data, headers=req_headers, timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError.from_exception(e, url) from e

        logger.debug('%s %s → %s', method, url, res.status_code)
        return Response(res.status_code, res.headers, res.content)

    def _valid_token(self, creds) -> str:
        if creds is None or not creds.id_token:
            raise NotAuthenticated()
        if not is_expired(creds.id_token):
            return creds.id_token

        logger.info('ID token expired or expiring soon; refreshing')
        try:
            tokens = self.refresher.refresh(creds.refresh_token)
        except OioError as e:
            raise AuthExpired(e) from e
        return tokens.id_token

    # ── Shorthands ────────────────────────────────────────────────────────────

    def get(self, path) -> Response:
        return self.request(path, 'GET')

    def post(self, path, body=None) -> Response:
        return self.request(path, 'POST', body=body)

    def patch(self, path, body=None) -> Response:
        return self.request(path, 'PATCH', body=body)

    def delete(self, path) -> Response:
        return self.request(path, 'DELETE')

    def get_no_auth(self, path) -> Response:
        return self.request(path, 'GET', require_auth=False)
