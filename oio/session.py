"""
Per-invocation wiring for the oio CLI: one ConfigStore, one ApiClient.

Commands call make_client() instead of building the pieces themselves so
tests can patch a single seam.
"""

from oio.api import ApiClient
from oio.config import ConfigStore


def open_store(path=None) -> ConfigStore:
    return ConfigStore(path)


def make_client(store=None) -> ApiClient:
    return ApiClient(store if store is not None else open_store())


def is_quiet(store) -> bool:
    """`quiet` preference: no spinners or progress bars."""
    return bool(store.preference('quiet', False))
