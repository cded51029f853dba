#!/usr/bin/env python3
"""
oio — stash text, files, and screenshots behind short-lived IDs.

  oio a "text"          add text          →  ID
  oio a report.pdf      add a file        →  ID
  oio g <id>            print or download
  oio ls                list with sizes and expiry
  oio d <id>            delete
"""

import argparse
import logging
import sys

from oio.api import err
from oio.errors import OioError

logger = logging.getLogger('oio')


def _positive_int(text):
    try:
        n = int(text)
    except ValueError:
        n = 0
    if n <= 0:
        raise argparse.ArgumentTypeError('invalid limit: must be a positive number')
    return n


def build_parser():
    from oio import __version__

    parser = argparse.ArgumentParser(
        prog='oio',
        description='Stash text, files, and screenshots — get an ID instantly.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
ids:
  Items live in one of three collections: shorts (text and files),
  screenshots, and Pro files. Commands that take an <id> find the
  collection for you, in that order.

ttl:
  30s, 60m, 24h, 7d. Default 24h (or `oio config set default_ttl ...`).
  Files are capped at 7 days. Use --permanent for no expiry.

examples:
  oio a "hello world"              text item, expires in 24h
  oio a report.pdf --ttl 7d        file upload, expires in 7 days
  oio a shot.png --screenshot      image as a screenshot item
  oio g abc1 -o ~/Downloads        download into a directory
  oio sh abc1 --expires 7d         share link (Pro)
  oio p abc1                       public share link (Pro)
  oio ls --sort expiry -l 10       ten items closest to expiring
  oio extend abc1 --permanent      never expire
""",
    )
    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log HTTP calls and retries to stderr')

    sub = parser.add_subparsers(dest='command')

    p_add = sub.add_parser('a', aliases=['add'], help='Add text, a file, or an image')
    p_add.add_argument('input', nargs='?', default=None,
                       help='Text or file path (default: read stdin)')
    p_add.add_argument('--ttl', default=None, help='Custom TTL (e.g. 1h, 7d). Default: 24h')
    p_add.add_argument('--permanent', action='store_true', help='Keep forever')
    p_add.add_argument('--screenshot', action='store_true',
                       help='Upload the file as a screenshot item (images only)')
    p_add.add_argument('--public', '-p', action='store_true', help='Create a public share on add (Pro)')
    p_add.add_argument('--password', default=None, help='Password-protected share on add (Pro)')
    p_add.add_argument('--title', default=None, help='Share title for social previews')
    p_add.add_argument('--desc', default=None, help='Share description for social previews')

    p_get = sub.add_parser('g', aliases=['get'], help='Print or download an item')
    p_get.add_argument('id', help='Item ID')
    p_get.add_argument('--output', '-o', default=None, help='Save into this directory')
    p_get.add_argument('--url', action='store_true', help='Print the download URL only')

    p_del = sub.add_parser('d', aliases=['delete'], help='Delete an item')
    p_del.add_argument('id', help='Item ID')
    p_del.add_argument('--force', '-f', action='store_true', help='Skip confirmation')

    p_sh = sub.add_parser('sh', aliases=['share'], help='Create a share link (Pro)')
    p_sh.add_argument('id', help='Item ID')
    p_sh.add_argument('--public', '-p', action='store_true', help='Public share (default)')
    p_sh.add_argument('--password', default=None, help='Password-protected share')
    p_sh.add_argument('--expires', default=None, help='Share lifetime (default 1d, e.g. 7d, 36h)')
    p_sh.add_argument('--title', default=None, help='Share title for social previews')
    p_sh.add_argument('--desc', default=None, help='Share description for social previews')

    p_pub = sub.add_parser('p', help='Create a public share link (Pro), same as sh <id> -p')
    p_pub.add_argument('id', help='Item ID')
    p_pub.add_argument('--expires', default=None, help='Share lifetime (default 1d, e.g. 7d, 36h)')
    p_pub.add_argument('--title', default=None, help='Share title for social previews')
    p_pub.add_argument('--desc', default=None, help='Share description for social previews')
    p_pub.set_defaults(public=True, password=None)

    p_ls = sub.add_parser('ls', aliases=['list'], help='List items')
    p_ls.add_argument('--type', '-t', default=None, metavar='TYPE',
                      help='Filter by type: text, file, screenshot, pro')
    p_ls.add_argument('--search', '-s', default=None, help='Search in id, content, and filename')
    p_ls.add_argument('--limit', '-l', type=_positive_int, default=None, help='Limit number of results')
    p_ls.add_argument('--sort', choices=['date', 'size', 'expiry'], default='date',
                      help='Sort by: date (newest), size (largest), expiry (soonest)')
    p_ls.add_argument('--raw', action='store_true', help='Output as JSON (for piping)')

    p_ext = sub.add_parser('extend', help="Change an item's expiry")
    p_ext.add_argument('id', help='Item ID')
    p_ext.add_argument('--ttl', default=None, help='New TTL from now (e.g. 7d)')
    p_ext.add_argument('--permanent', action='store_true', help='Remove the expiry')

    sub.add_parser('health', help='Check API status')

    p_cfg = sub.add_parser('config', help='Show or change settings')
    p_cfg.add_argument('action', nargs='?', default='list',
                       choices=['list', 'get', 'set', 'path', 'reset'])
    p_cfg.add_argument('key', nargs='?', default=None)
    p_cfg.add_argument('value', nargs='?', default=None)
    p_cfg.add_argument('--force', '-f', action='store_true', help='Skip confirmation (reset)')

    p_auth = sub.add_parser('auth', help='Inspect or clear the stored session')
    p_auth.add_argument('action', choices=['whoami', 'logout'])

    return parser


def _commands():
    from oio.commands.add import cmd_add
    from oio.commands.auth import cmd_auth
    from oio.commands.config import cmd_config
    from oio.commands.delete import cmd_delete
    from oio.commands.extend import cmd_extend
    from oio.commands.get import cmd_get
    from oio.commands.health import cmd_health
    from oio.commands.ls import cmd_ls
    from oio.commands.share import cmd_share

    return {
        'a': cmd_add, 'add': cmd_add,
        'g': cmd_get, 'get': cmd_get,
        'd': cmd_delete, 'delete': cmd_delete,
        'sh': cmd_share, 'share': cmd_share, 'p': cmd_share,
        'ls': cmd_ls, 'list': cmd_ls,
        'extend': cmd_extend,
        'health': cmd_health,
        'config': cmd_config,
        'auth': cmd_auth,
    }


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    commands = _commands()
    if args.command not in commands:
        parser.print_help()
        return

    try:
        commands[args.command](args)
    except OioError as e:
        logger.debug('command %s failed', args.command, exc_info=True)
        err(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print(file=sys.stderr)
        sys.exit(130)


if __name__ == '__main__':
    main()
