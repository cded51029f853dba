"""
oio/tests/test_config.py

Config file I/O, user-settable keys, and the credential store.
"""

import json
import os
import stat
import sys
from pathlib import Path

import pytest

from oio import config
from oio.config import ConfigStore, CredentialSet
from oio.errors import OioError


class TestPaths:
    def test_env_override(self, isolated_config):
        assert config.config_path() == isolated_config

    def test_xdg_on_linux(self, monkeypatch, tmp_path):
        monkeypatch.delenv('OIO_CONFIG')
        monkeypatch.setattr(sys, 'platform', 'linux')
        monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path))
        assert config.config_path() == tmp_path / 'oio' / 'config.json'

    def test_macos(self, monkeypatch):
        monkeypatch.setattr(sys, 'platform', 'darwin')
        assert config.config_dir() == Path.home() / 'Library' / 'Application Support' / 'oio'


class TestLoadSave:
    def test_missing_file_is_empty(self, isolated_config):
        assert config.load() == {}

    def test_blank_file_is_empty(self, isolated_config):
        isolated_config.write_text('  \n')
        assert config.load() == {}

    def test_roundtrip(self, isolated_config):
        config.save({'default_ttl': '7d'})
        assert config.load() == {'default_ttl': '7d'}

    def test_invalid_json_raises(self, isolated_config):
        isolated_config.write_text('{nope')
        with pytest.raises(OioError, match='not valid JSON'):
            config.load()

    @pytest.mark.skipif(os.name == 'nt', reason='POSIX permissions')
    def test_owner_only_permissions(self, isolated_config):
        config.save({'id_token': 'secret'})
        assert stat.S_IMODE(isolated_config.stat().st_mode) == 0o600

    def test_creates_parent_dirs(self, tmp_path):
        path = tmp_path / 'a' / 'b' / 'config.json'
        config.save({'quiet': True}, path)
        assert json.loads(path.read_text()) == {'quiet': True}


class TestSetValue:
    def test_default_ttl(self):
        assert config.set_value('default_ttl', '7d') == '7d'
        assert config.load()['default_ttl'] == '7d'

    def test_default_ttl_validated(self):
        with pytest.raises(OioError, match='default_ttl'):
            config.set_value('default_ttl', 'forever')

    def test_quiet_stored_as_bool(self):
        assert config.set_value('quiet', 'true') is True
        assert config.load()['quiet'] is True

    def test_quiet_validated(self):
        with pytest.raises(OioError, match='"true" or "false"'):
            config.set_value('quiet', 'yes')

    def test_baseurl_trailing_slash_stripped(self):
        assert config.set_value('baseurl', 'https://x.test/') == 'https://x.test'

    def test_protected_key_rejected(self):
        with pytest.raises(OioError, match='protected key'):
            config.set_value('id_token', 'x')

    def test_unknown_key_rejected(self):
        with pytest.raises(OioError, match='not a valid configuration key'):
            config.set_value('color', 'x')

    def test_keeps_other_keys(self):
        config.save({'id_token': 'tok'})
        config.set_value('default_ttl', '1h')
        assert config.load() == {'id_token': 'tok', 'default_ttl': '1h'}


class TestReset:
    def test_removes_file(self, isolated_config):
        config.save({'quiet': True})
        config.reset()
        assert not isolated_config.exists()

    def test_missing_file_is_fine(self, isolated_config):
        config.reset()
        assert not isolated_config.exists()


# ── Credential store ──────────────────────────────────────────────────────────

class TestCredentialSet:
    def test_authenticated_needs_id_and_refresh(self):
        assert CredentialSet(id_token='a', refresh_token='b').is_authenticated
        assert not CredentialSet(id_token='a').is_authenticated
        assert not CredentialSet(refresh_token='b').is_authenticated

    def test_config_roundtrip(self):
        creds = CredentialSet('https://x.test', 'id', 'acc', 'ref', '2026-01-01T00:00:00+00:00')
        again = CredentialSet.from_config(creds.to_config())
        assert again.to_config() == creds.to_config()


class TestConfigStore:
    def test_get_none_when_empty(self, store):
        assert store.get() is None

    def test_get_none_with_only_preferences(self, store):
        config.save({'default_ttl': '1h'}, store.path)
        assert store.get() is None

    def test_persist_merges(self, store):
        config.save({'default_ttl': '1h'}, store.path)
        store.persist(CredentialSet(base_url='https://x.test', id_token='id', refresh_token='ref'))
        data = config.load(store.path)
        assert data['default_ttl'] == '1h'
        assert data['baseurl'] == 'https://x.test'
        assert 'access_token' not in data

    def test_get_after_persist(self, store):
        store.persist(CredentialSet(base_url='https://x.test', id_token='id', refresh_token='ref'))
        creds = store.get()
        assert creds.base_url == 'https://x.test'
        assert creds.is_authenticated

    def test_clear_keeps_preferences(self, logged_in):
        config.set_value('quiet', 'true', logged_in.path)
        logged_in.clear()
        assert logged_in.get() is None
        assert logged_in.preference('quiet') is True

    def test_default_path_follows_env(self, isolated_config):
        assert ConfigStore().path == isolated_config
