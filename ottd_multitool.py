#!/usr/bin/env python3

import argparse
import asyncio
import logging
import os
import sys
import signal

from ottd_client.client import OpenTTDAdminClient

BOT_NAME = "openttd-multitool"
CURRENT_VERSION = "0.2.0"

PASSWORD_ENV = "OPENTTD_ADMIN_PASSWORD"


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Run RCON commands on an OpenTTD server as game time passes")
    parser.add_argument(
        '--hostname',
        default='localhost',
        help='The hostname (or IP address) of the OpenTTD server to connect to'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=3977,
        help='The port number of the admin interface (default is 3977)'
    )
    parser.add_argument(
        '--password',
        default=os.environ.get(PASSWORD_ENV, ''),
        help=f"The password for the admin interface ('admin_password' in openttd.cfg, "
             f"default: ${PASSWORD_ENV})"
    )
    for period in ('daily', 'monthly', 'yearly'):
        parser.add_argument(
            f'--{period}',
            action='append',
            default=[],
            metavar='COMMAND',
            type=str.strip,
            help=f'An RCON command to run {period} - may be repeated'
        )
    parser.add_argument(
        '--debug-packets',
        metavar='DIR',
        nargs='?',
        const='packets',  # Default when --debug-packets provided without arg
        default=None,     # Default when --debug-packets not provided
        help='Enable packet debugging to DIR (default: packets)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log debug output'
    )
    return parser.parse_args(argv)


def build_client(args) -> OpenTTDAdminClient:
    """Create the client and register the scheduled commands from the arguments."""
    client = OpenTTDAdminClient(debug_packets_dir=args.debug_packets)
    for period in ('daily', 'monthly', 'yearly'):
        for command in getattr(args, period):
            client.register_date_change(period, command)
    return client


async def main() -> int:
    """
    Main entry point for the OpenTTD multitool.

    Connects to the admin port and runs until interrupted, reconnecting
    whenever the server goes away.
    """
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if not args.password:
        print("ERROR: You must supply a password", file=sys.stderr)
        return os.EX_USAGE

    client = build_client(args)
    shutdown_event = asyncio.Event()

    def signal_handler(signum):
        """Handle Unix signals by setting shutdown event"""
        sig_name = signal.Signals(signum).name
        logging.getLogger(__name__).info("Received %s, shutting down gracefully...", sig_name)
        shutdown_event.set()

    loop = asyncio.get_running_loop()

    # Handle SIGTERM availability for cross-platform compatibility
    signals = [signal.SIGINT]
    if hasattr(signal, 'SIGTERM'):
        signals.append(signal.SIGTERM)

    for sig in signals:
        loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))

    await client.run(args.hostname, args.port, args.password, BOT_NAME, CURRENT_VERSION,
                     shutdown_event=shutdown_event)

    return os.EX_OK


def _console_main() -> int:
    return asyncio.run(main())


if __name__ == "__main__":
    sys.exit(_console_main())
