"""
Internet Connection Sharing control
===================================

Enable, inspect and disable Windows Internet Connection Sharing (ICS)
from the command line. Must be run from an elevated prompt.

Usage:
------
Share Wi-Fi with a wired network:
    icsctl set-sharing --public "Wi-Fi" --private "Ethernet"

Names accept wildcards when unambiguous:
    icsctl set-sharing --public "Wi*" --private "Ethernet 2"

Show the connections currently sharing:
    icsctl get-status --enabled-only

Turn sharing off everywhere, previewing first:
    icsctl disable-sharing --dry-run
"""

import argparse
import sys
from typing import Optional

from icsctl.config import SORT_ORDERS, Settings, load_settings
from icsctl.controller.main_controller import SharingController
from icsctl.exceptions import IcsError
from icsctl.logging_utility import logger, setup_logging
from icsctl.view.console import format_status_table


def _add_change_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--pass-through', action='store_true',
                        help='Print the resulting status of the affected connections')
    parser.add_argument('--dry-run', action='store_true',
                        help='Show what would change without changing anything')
    parser.add_argument('--confirm', action='store_true',
                        help='Ask for confirmation before changing anything')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='icsctl',
        description='Control Windows Internet Connection Sharing',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--config', metavar='FILE', help='Configuration file (default: ~/.icsctl.conf)')
    parser.add_argument('--log-file', metavar='FILE', help='Also write log messages to this file')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    set_parser = subparsers.add_parser('set-sharing', help='Share a public connection with a private one')
    set_parser.add_argument('--public', required=True, metavar='NAME',
                            help='Connection that provides internet access')
    set_parser.add_argument('--private', required=True, metavar='NAME',
                            help='Connection that receives shared access')
    _add_change_options(set_parser)
    set_parser.set_defaults(handler=_cmd_set_sharing)

    status_parser = subparsers.add_parser('get-status', help='Report sharing status')
    status_parser.add_argument('--names', nargs='+', metavar='NAME', help='Connections to report')
    scope = status_parser.add_mutually_exclusive_group()
    scope.add_argument('--all', dest='scope', action='store_const', const='all',
                       help='Report every connection')
    scope.add_argument('--enabled-only', dest='scope', action='store_const', const='enabled',
                       help='Report only connections with sharing enabled')
    status_parser.add_argument('--sort', choices=SORT_ORDERS,
                               help='Sort by name, or by sharing state then type')
    status_parser.add_argument('--strict', action=argparse.BooleanOptionalAction, default=None,
                               help='Fail when a named connection does not exist')
    status_parser.set_defaults(handler=_cmd_get_status)

    disable_parser = subparsers.add_parser('disable-sharing', help='Disable sharing on every connection')
    _add_change_options(disable_parser)
    disable_parser.set_defaults(handler=_cmd_disable_sharing)

    return parser


def _cmd_set_sharing(args: argparse.Namespace, settings: Settings, controller: SharingController) -> None:
    result = controller.set_sharing(
        args.public,
        args.private,
        pass_through=args.pass_through,
        dry_run=args.dry_run,
        confirm=args.confirm,
    )
    if result.already_set:
        print("Sharing is already set.")
    elif result.changed:
        print(f"Sharing enabled: '{result.public}' (public) -> '{result.private}' (private)")
    if result.statuses:
        print(format_status_table(result.statuses))


def _cmd_get_status(args: argparse.Namespace, settings: Settings, controller: SharingController) -> None:
    statuses = controller.get_status(
        names=args.names,
        scope=args.scope or settings.scope,
        sort=args.sort or settings.sort,
        strict=settings.strict if args.strict is None else args.strict,
    )
    print(format_status_table(statuses))


def _cmd_disable_sharing(args: argparse.Namespace, settings: Settings, controller: SharingController) -> None:
    changed = controller.disable_all(dry_run=args.dry_run, confirm=args.confirm)
    if changed:
        print("Sharing disabled on: " + ", ".join(changed))
        if args.pass_through:
            print(format_status_table(controller.get_status(names=changed, sort=settings.sort, strict=False)))


def main(argv: Optional[list[str]] = None, controller: Optional[SharingController] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
        setup_logging(args.debug, settings.log_level, args.log_file or settings.log_file)
    except IcsError as e:
        setup_logging(args.debug)
        logger.error(str(e))
        return 1

    if controller is None:
        controller = SharingController()

    try:
        args.handler(args, settings, controller)
    except IcsError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
