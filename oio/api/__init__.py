"""
Public API surface for the oio CLI.
Import from here to keep command modules clean.
"""

from .client import ApiClient, Response
from .auth import TokenRefresher, TokenSet, RefreshFailed
from .items import (
    add_text, add_screenshot, add_file, calculate_ttl,
    list_items, filter_items, sort_items, extend_item, health, download, Item,
)
from .resolve import resolve, get_item, delete_item, share_item, parse_expires_to_days
from .helpers import err, ok, warn

__all__ = [
    'ApiClient', 'Response',
    'TokenRefresher', 'TokenSet', 'RefreshFailed',
    'add_text', 'add_screenshot', 'add_file', 'calculate_ttl',
    'list_items', 'filter_items', 'sort_items', 'extend_item', 'health', 'download', 'Item',
    'resolve', 'get_item', 'delete_item', 'share_item', 'parse_expires_to_days',
    'err', 'ok', 'warn',
]
