"""
oio auth — inspect or drop the stored session.

  oio auth whoami     base URL, user claims, session age
  oio auth logout     forget base URL and tokens
"""

from datetime import datetime, timedelta, timezone

from oio.api import ok
from oio.errors import OioError
from oio.format import local_time
from oio.session import open_store
from oio.tokens import InvalidToken, decode_claims, token_expiry

# Cognito refresh tokens outlive the ID token by about a year.
SESSION_LIFETIME = timedelta(days=365)


def cmd_auth(args):
    if args.action == 'whoami':
        whoami()
    elif args.action == 'logout':
        logout()
    else:
        raise OioError(f'unknown subcommand "{args.action}". Available subcommands: whoami, logout')


def whoami(store=None, now=None):
    store = store or open_store()
    creds = store.get()
    if creds is None or not creds.base_url or not creds.access_token:
        print('You are not currently logged in.')
        return

    print('\nCurrent Authentication Status:')
    print('-' * 30)
    print(f'Base URL: {creds.base_url}')

    if creds.id_token:
        try:
            claims = decode_claims(creds.id_token)
        except InvalidToken:
            claims = None
        if claims is not None:
            print('\nUser Information:')
            for label, value in (('User ID', claims.sub), ('Email', claims.email),
                                 ('Name', claims.name), ('Username', claims.preferred_username)):
                if value:
                    print(f'  {label}: {value}')
            if claims.exp:
                print(f'  ID token expires: {local_time(token_expiry(creds.id_token))}')

    print('\nSession Information:')
    logged_in = _parse_iso(creds.logged_in_at)
    if logged_in is None:
        print('  Session expires: ~1 year from login')
        print('  (Re-login to see exact expiration date)')
    else:
        expiry = logged_in + SESSION_LIFETIME
        days_left = int((expiry - (now or datetime.now(timezone.utc))).total_seconds() // 86400)
        print(f'  Logged in: {local_time(logged_in)}')
        print(f'  Session expires: {local_time(expiry)}')
        if days_left > 0:
            print(f'  Status: Valid ({days_left} days remaining)')
        else:
            print('  Status: EXPIRED (please login again)')
    print()


def logout(store=None):
    store = store or open_store()
    if store.get() is None:
        print('You are not currently logged in.')
        return
    store.clear()
    ok('Logged out. All credentials have been cleared.')


def _parse_iso(text):
    if not text:
        return None
    try:
        dt = datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
