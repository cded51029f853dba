"""
oio/tests/conftest.py

Shared pytest fixtures. No test touches the network or the real config file.
"""

import base64
import json
import time
from unittest.mock import MagicMock

import pytest

from oio.api.client import Response
from oio.config import ConfigStore, CredentialSet

BASE_URL = 'https://api.oio.test'


def _b64(obj) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b'=').decode()


def make_jwt(**claims) -> str:
    """Unsigned header.payload.signature token carrying `claims`."""
    return f'{_b64({"alg": "RS256", "typ": "JWT"})}.{_b64(claims)}.c2lnbmF0dXJl'


def make_response(status=200, body=None, headers=None) -> Response:
    raw = json.dumps(body).encode() if body is not None else b''
    return Response(status, headers or {}, raw)


@pytest.fixture
def jwt():
    return make_jwt


@pytest.fixture
def response():
    return make_response


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point OIO_CONFIG at a temp file so nothing reads ~/.config/oio."""
    path = tmp_path / 'config.json'
    monkeypatch.setenv('OIO_CONFIG', str(path))
    return path


@pytest.fixture
def store(isolated_config):
    return ConfigStore(isolated_config)


@pytest.fixture
def logged_in(store):
    """Store holding a base URL and an ID token good for another hour."""
    store.persist(CredentialSet(
        base_url=BASE_URL,
        id_token=make_jwt(sub='user-1', email='me@example.com', exp=int(time.time()) + 3600),
        access_token='access-token-0123456789',
        refresh_token='refresh-token-0123456789',
        logged_in_at='2026-01-01T00:00:00+00:00',
    ))
    return store


@pytest.fixture
def fake_client():
    """Stand-in for ApiClient: set .request.side_effect to scripted Responses."""
    client = MagicMock()
    client.get.side_effect = lambda path: client.request(path, 'GET')
    client.post.side_effect = lambda path, body=None: client.request(path, 'POST', body=body)
    client.patch.side_effect = lambda path, body=None: client.request(path, 'PATCH', body=body)
    client.delete.side_effect = lambda path: client.request(path, 'DELETE')
    client.get_no_auth.side_effect = lambda path: client.request(path, 'GET', require_auth=False)
    return client
