"""
oio config — show and change settings.

  oio config                      list every key (tokens masked)
  oio config get default_ttl
  oio config set default_ttl 7d   allowed: baseurl, default_ttl, quiet
  oio config path
  oio config reset [-f]           delete the file (logs you out)
"""

from oio import config
from oio.api import ok
from oio.commands.delete import confirm
from oio.errors import OioError
from oio.tokens import mask_token

_ORDER = ('baseurl', 'default_ttl', 'quiet') + config.PROTECTED_KEYS
_TOKEN_KEYS = ('id_token', 'access_token', 'refresh_token')


def cmd_config(args):
    action = args.action or 'list'
    if action == 'list':
        show_all()
    elif action == 'get':
        if not args.key:
            raise OioError('please specify a key to get. Usage: oio config get <key>')
        show_value(args.key)
    elif action == 'set':
        if not args.key or args.value is None:
            raise OioError('please specify a key and value to set. Usage: oio config set <key> <value>')
        value = config.set_value(args.key, args.value)
        ok(f'Set "{args.key}" to "{_display(value)}"')
    elif action == 'path':
        print(config.config_path())
    elif action == 'reset':
        if not args.force and not confirm(
            'Are you sure you want to reset all configuration? This will log you out. [y/N]: '
        ):
            print('Reset cancelled.')
            return
        config.reset()
        ok('Configuration reset. All values have been cleared.')
    else:
        raise OioError(f'unknown subcommand "{action}". Available subcommands: get, set, path, reset')


def show_all():
    cfg = config.load()
    print('\nConfiguration:')
    print('-' * 50)
    if not cfg:
        print('No configuration values set.\n')
        return
    for key in _ORDER:
        protected = key in config.PROTECTED_KEYS
        value = _display(cfg.get(key, False if key == 'quiet' else ''))
        if not value:
            value = '(not set)'
        elif protected and len(value) > 8:
            value = mask_token(value)
        suffix = ' (protected)' if protected else ''
        print(f'  {key}: {value}{suffix}')
    print()


def show_value(key):
    if key not in _ORDER:
        raise OioError(f'unknown key "{key}"')
    cfg = config.load()
    value = _display(cfg.get(key, False if key == 'quiet' else ''))
    if key in _TOKEN_KEYS:
        value = mask_token(value) if value else ''
    if not value:
        print(f'Key "{key}" is not set.')
    else:
        print(value)


def _display(value) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)
