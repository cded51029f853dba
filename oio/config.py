"""
Config management for the oio CLI.

Stores the API base URL, tokens, and user preferences in config.json under
the per-platform config directory (see config_dir()). OIO_CONFIG overrides
the file path entirely.

ConfigStore is the credential store handed to ApiClient — there is no
process-wide config object, so tests can point a store at a temp file.
"""

import json
import os
import sys
from pathlib import Path

from oio.errors import OioError

DEFAULT_BASE_URL = 'https://auth.yumaverse.com'

ALLOWED_KEYS = ('baseurl', 'default_ttl', 'quiet')
PROTECTED_KEYS = ('id_token', 'access_token', 'refresh_token', 'logged_in_at')

_CREDENTIAL_KEYS = ('baseurl',) + PROTECTED_KEYS


def config_dir() -> Path:
    """~/.config/oio on Linux, ~/Library/Application Support/oio on macOS, %APPDATA%/oio on Windows."""
    if sys.platform == 'darwin':
        return Path.home() / 'Library' / 'Application Support' / 'oio'
    if sys.platform.startswith('win'):
        appdata = os.environ.get('APPDATA')
        base = Path(appdata) if appdata else Path.home() / 'AppData' / 'Roaming'
        return base / 'oio'
    xdg = os.environ.get('XDG_CONFIG_HOME')
    base = Path(xdg) if xdg else Path.home() / '.config'
    return base / 'oio'


def config_path() -> Path:
    override = os.environ.get('OIO_CONFIG')
    if override:
        return Path(override)
    return config_dir() / 'config.json'


def load(path=None):
    """Load config from disk. Returns empty dict if missing or empty."""
    p = Path(path) if path else config_path()
    if not p.exists():
        return {}
    text = p.read_text()
    if not text.strip():
        return {}
    try:
        return json.loads(text)
    except ValueError as e:
        raise OioError(f'config file {p} is not valid JSON: {e}') from e


def save(cfg, path=None):
    """Save config to disk, creating parent dirs if needed. Owner-only permissions."""
    p = Path(path) if path else config_path()
    p.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    p.write_text(json.dumps(cfg, indent=2) + '\n')
    try:
        p.chmod(0o600)
    except OSError:
        pass  # not supported on every filesystem (e.g. FAT, some Windows mounts)


def set_value(key, value, path=None):
    """
    Set a user-modifiable key. Raises OioError for protected/unknown keys
    or a malformed default_ttl.
    """
    from oio.ttl import is_valid_ttl

    if key in PROTECTED_KEYS:
        raise OioError(
            f'"{key}" is a protected key and cannot be modified manually. '
            f'Protected keys: {", ".join(PROTECTED_KEYS)}'
        )
    if key not in ALLOWED_KEYS:
        raise OioError(
            f'"{key}" is not a valid configuration key. '
            f'Allowed keys: {", ".join(ALLOWED_KEYS)}'
        )
    if key == 'default_ttl' and not is_valid_ttl(value):
        raise OioError('"default_ttl" must be in format like "30s", "60m", "24h", or "7d"')
    if key == 'quiet':
        if str(value).lower() not in ('true', 'false'):
            raise OioError('"quiet" must be "true" or "false"')
        value = str(value).lower() == 'true'
    if key == 'baseurl':
        value = value.rstrip('/')

    cfg = load(path)
    cfg[key] = value
    save(cfg, path)
    return value


def reset(path=None):
    """Delete the config file. Logs the user out and drops every preference."""
    p = Path(path) if path else config_path()
    if p.exists():
        p.unlink()


# ── Credentials ───────────────────────────────────────────────────────────────

class CredentialSet:
    """
    Base URL plus the token triple. id_token and refresh_token come as a
    pair: with either missing the set is unauthenticated.
    """

    def __init__(self, base_url='', id_token='', access_token='',
                 refresh_token='', logged_in_at=''):
        self.base_url = base_url
        self.id_token = id_token
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.logged_in_at = logged_in_at

    @property
    def is_authenticated(self) -> bool:
        return bool(self.id_token and self.refresh_token)

    @classmethod
    def from_config(cls, cfg: dict) -> 'CredentialSet':
        return cls(
            base_url=cfg.get('baseurl', ''),
            id_token=cfg.get('id_token', ''),
            access_token=cfg.get('access_token', ''),
            refresh_token=cfg.get('refresh_token', ''),
            logged_in_at=cfg.get('logged_in_at', ''),
        )

    def to_config(self) -> dict:
        return {
            'baseurl': self.base_url,
            'id_token': self.id_token,
            'access_token': self.access_token,
            'refresh_token': self.refresh_token,
            'logged_in_at': self.logged_in_at,
        }

    def __repr__(self):
        return f'CredentialSet(base_url={self.base_url!r}, authenticated={self.is_authenticated})'


class ConfigStore:
    """Credential store backed by the JSON config file."""

    def __init__(self, path=None):
        self.path = Path(path) if path else config_path()

    def load(self) -> dict:
        return load(self.path)

    def get(self):
        """CredentialSet, or None when no base URL or tokens are stored."""
        cfg = self.load()
        if not any(cfg.get(k) for k in _CREDENTIAL_KEYS):
            return None
        return CredentialSet.from_config(cfg)

    def persist(self, creds: CredentialSet) -> None:
        """Write credential fields, keeping every other key in the file."""
        cfg = self.load()
        for key, value in creds.to_config().items():
            if value:
                cfg[key] = value
            else:
                cfg.pop(key, None)
        save(cfg, self.path)

    def clear(self) -> None:
        """Forget base URL and tokens (logout). Preferences survive."""
        cfg = self.load()
        for key in _CREDENTIAL_KEYS:
            cfg.pop(key, None)
        save(cfg, self.path)

    def preference(self, key, default=None):
        return self.load().get(key, default)
