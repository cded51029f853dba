"""
Bearer token (JWT) claims and the expiry gate.

Nothing here verifies signatures — the server does that. The client only
reads `exp` so it can refresh before a request instead of after a 401.
"""

import base64
import binascii
import json
import time
from datetime import datetime, timezone

# Tokens with less than this many seconds left count as expired.
EXPIRY_BUFFER_SECS = 60


class InvalidToken(ValueError):
    pass


class Claims:
    """The subset of ID-token claims the CLI cares about."""

    def __init__(self, sub='', email='', name='', preferred_username='', iat=0, exp=0):
        self.sub = sub
        self.email = email
        self.name = name
        self.preferred_username = preferred_username
        self.iat = iat
        self.exp = exp

    @classmethod
    def from_payload(cls, payload: dict) -> 'Claims':
        return cls(
            sub=_str(payload.get('sub')),
            email=_str(payload.get('email')),
            name=_str(payload.get('name')),
            preferred_username=_str(payload.get('preferred_username')),
            iat=_int(payload.get('iat')),
            exp=_int(payload.get('exp')),
        )

    def __repr__(self):
        return f'Claims(sub={self.sub!r}, email={self.email!r}, exp={self.exp})'


def decode_claims(token: str) -> Claims:
    """
    Decode the middle segment of a header.payload.signature token.

    Padding is restored if missing; the URL-safe alphabet is tried first and
    the standard alphabet second. Raises InvalidToken on anything malformed.
    """
    parts = (token or '').split('.')
    if len(parts) != 3:
        raise InvalidToken('invalid JWT format')

    segment = parts[1]
    segment += '=' * (-len(segment) % 4)

    try:
        raw = base64.b64decode(segment, altchars=b'-_', validate=True)
    except (binascii.Error, ValueError):
        try:
            raw = base64.b64decode(segment, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidToken(f'invalid JWT payload encoding: {e}') from e

    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise InvalidToken(f'invalid JWT payload: {e}') from e
    if not isinstance(payload, dict):
        raise InvalidToken('invalid JWT payload: not an object')

    return Claims.from_payload(payload)


def is_expired(token: str, now: float | None = None) -> bool:
    """
    True if the token must be refreshed before use.

    Empty, undecodable, or exp-less tokens count as expired. Otherwise the
    token is expired when exp falls inside the look-ahead buffer.
    """
    if not token:
        return True
    try:
        claims = decode_claims(token)
    except InvalidToken:
        return True
    if not claims.exp:
        return True
    now = time.time() if now is None else now
    return claims.exp < now + EXPIRY_BUFFER_SECS


def token_expiry(token: str) -> datetime:
    """UTC expiry of the token. Raises InvalidToken."""
    return datetime.fromtimestamp(decode_claims(token).exp, tz=timezone.utc)


def mask_token(token: str) -> str:
    """'eyJraWQiOi...' → 'eyJr...XyZ9'"""
    if not token:
        return '(not set)'
    if len(token) <= 8:
        return '****'
    return f'{token[:4]}...{token[-4:]}'


def _str(v):
    return v if isinstance(v, str) else ''


def _int(v):
    if isinstance(v, bool):
        return 0
    if isinstance(v, (int, float)):
        return int(v)
    return 0
