"""
Token refresh against the Cognito token endpoint.

ApiClient calls TokenRefresher.refresh() when the stored ID token is inside
the expiry buffer. On success the new tokens are persisted to the store
before the caller continues. Device-flow login lives outside this module.
"""

import logging

import requests

from oio.errors import NotAuthenticated, OioError, TransportError

logger = logging.getLogger(__name__)

COGNITO_DOMAIN = 'oio-70676d07.auth.us-west-2.amazoncognito.com'
CLIENT_ID = '5s958v222hp10p0qe86duks7ku'
TOKEN_ENDPOINT = f'https://{COGNITO_DOMAIN}/oauth2/token'

REFRESH_TIMEOUT_SECS = 30


class TokenSet:
    def __init__(self, id_token, access_token='', refresh_token='', expires_in=0):
        self.id_token = id_token
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.expires_in = expires_in

    @classmethod
    def from_response(cls, data: dict) -> 'TokenSet':
        return cls(
            id_token=data.get('id_token', ''),
            access_token=data.get('access_token', ''),
            refresh_token=data.get('refresh_token', ''),
            expires_in=data.get('expires_in', 0),
        )


class RefreshFailed(OioError):
    pass


class TokenRefresher:
    """Exchanges a refresh token for new ID/access tokens and persists them."""

    def __init__(self, store, session=None, endpoint=TOKEN_ENDPOINT, client_id=CLIENT_ID):
        self.store = store
        self.session = session or requests
        self.endpoint = endpoint
        self.client_id = client_id

    def refresh(self, refresh_token) -> TokenSet:
        if not refresh_token:
            raise NotAuthenticated(
                'no refresh token available. Please log in again'
            )

        try:
            res = self.session.post(
                self.endpoint,
                data={
                    'grant_type': 'refresh_token',
                    'client_id': self.client_id,
                    'refresh_token': refresh_token,
                },
                headers={'Content-Type': 'application/x-www-form-urlencoded'},
                timeout=REFRESH_TIMEOUT_SECS,
            )
        except requests.RequestException as e:
            raise TransportError.from_exception(e, self.endpoint) from e

        if res.status_code != 200:
            raise RefreshFailed(_error_text(res))

        try:
            tokens = TokenSet.from_response(res.json())
        except ValueError as e:
            raise RefreshFailed(f'invalid token response: {e}') from e
        if not tokens.id_token:
            raise RefreshFailed('token response did not include an id_token')

        self._persist(tokens)
        logger.info('Refreshed ID token')
        return tokens

    def _persist(self, tokens):
        creds = self.store.get()
        if creds is None:
            from oio.config import CredentialSet
            creds = CredentialSet()
        creds.id_token = tokens.id_token
        creds.access_token = tokens.access_token
        # Cognito only rotates the refresh token sometimes.
        if tokens.refresh_token:
            creds.refresh_token = tokens.refresh_token
        self.store.persist(creds)


def _error_text(res):
    try:
        data = res.json()
    except ValueError:
        return f'failed to refresh tokens: {res.text[:200]}'
    if not isinstance(data, dict):
        return 'failed to refresh tokens'
    return data.get('error_description') or data.get('error') or 'failed to refresh tokens'
