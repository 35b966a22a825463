"""
Main CLI entry point for mingpkg

Commands:
- mingpkg update            (fetch the package index)
- mingpkg install <pkg>     (install a package and its dependencies)
- mingpkg uninstall <pkg>   (remove a package)
- mingpkg list              (installed packages)
- mingpkg search <text>
- mingpkg info <pkg>
- mingpkg url <pkg>
- mingpkg help
"""

import argparse
import logging
import sys

from .. import __version__
from ..core.config import ARCH_ENV, load_config
from ..core.database import PackageDatabase
from ..core.errors import MingpkgError, PackageNotFound
from .commands import (
    cmd_info,
    cmd_install,
    cmd_list,
    cmd_search,
    cmd_uninstall,
    cmd_update,
    cmd_url,
)

COMMANDS = ('help', 'info', 'install', 'list', 'search', 'uninstall', 'update', 'url')


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with all commands."""

    parser = argparse.ArgumentParser(
        prog='mingpkg',
        description='Secondary package manager for MinGW-w64 binary packages',
        epilog=f'Set {ARCH_ENV}=32 to manage 32-bit packages (default: 64).'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'mingpkg {__version__}'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--nocolor',
        action='store_true',
        help='Disable colored output'
    )

    parser.add_argument(
        '--flat',
        action='store_true',
        help='Flat output (one item per line, parsable)'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        title='commands',
        metavar='<command>'
    )

    subparsers.add_parser('help', help='Show this help')

    info_parser = subparsers.add_parser('info', help='Show package details')
    info_parser.add_argument('package', help='Package name')

    install_parser = subparsers.add_parser(
        'install', help='Install a package and its dependencies'
    )
    install_parser.add_argument('package', help='Package name')
    install_parser.add_argument(
        '--yes', '-y',
        action='store_true',
        help='No confirmation'
    )

    subparsers.add_parser('list', help='List installed packages')

    search_parser = subparsers.add_parser('search', help='Search the package index')
    search_parser.add_argument('pattern', help='Text to look for in names and descriptions')

    uninstall_parser = subparsers.add_parser('uninstall', help='Remove an installed package')
    uninstall_parser.add_argument('package', help='Package name')
    uninstall_parser.add_argument(
        '--yes', '-y',
        action='store_true',
        help='No confirmation'
    )

    subparsers.add_parser('update', help='Fetch the package index')

    url_parser = subparsers.add_parser('url', help="Show a package's upstream URL")
    url_parser.add_argument('package', help='Package name')

    return parser


def _first_positional(argv) -> str:
    for arg in argv:
        if not arg.startswith('-'):
            return arg
    return None


def _print_error(error: MingpkgError):
    from . import colors

    print(colors.error(f"Error: {error}"), file=sys.stderr)
    if isinstance(error, PackageNotFound) and error.possible:
        print(colors.info("Possible packages:"), file=sys.stderr)
        for name in error.possible:
            print(f"  {name}", file=sys.stderr)


def dispatch(args, db: PackageDatabase) -> int:
    """Route parsed arguments to their command handler."""
    handlers = {
        'info': cmd_info,
        'install': cmd_install,
        'list': cmd_list,
        'search': cmd_search,
        'uninstall': cmd_uninstall,
        'update': cmd_update,
        'url': cmd_url,
    }
    return handlers[args.command](args, db)


def main(argv=None) -> int:
    """Main CLI entry point."""
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()

    from . import colors
    command = _first_positional(argv)
    if command is not None and command not in COMMANDS:
        colors.init(nocolor='--nocolor' in argv)
        print(colors.error(f"Error: unknown command '{command}'"), file=sys.stderr)
        parser.print_help()
        return 1

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s',
            stream=sys.stderr
        )

    colors.init(nocolor=args.nocolor)

    from . import display
    display.init(mode='flat' if args.flat else 'columns')

    try:
        config = load_config()
    except MingpkgError as e:
        _print_error(e)
        return 1

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == 'help':
        parser.print_help()
        return 0

    try:
        db = PackageDatabase(config)
        return dispatch(args, db)
    except MingpkgError as e:
        _print_error(e)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


if __name__ == '__main__':
    sys.exit(main())
