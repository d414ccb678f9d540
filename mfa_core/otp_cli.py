#!/usr/bin/env python3
"""
otp_cli.py — `mfa-cli` command line front end.

Subcommands:
- profile add <name> <secret> : register a Base32 secret under a name
- profile list                : print profile names (registration order)
- profile remove <name>       : delete a profile
- show <name> [--watch]       : print the current TOTP code (refresh every second with --watch)
- serve                       : run the local JSON API (mfa_backend)

Exit codes:
  0 ok, 1 profile not found, 2 usage error, 3 validation failure, 4 profile file error,
  5 undecodable secret, 6 clock error

Usage examples:
  mfa-cli profile add github JBSWY3DPEHPK3PXP
  mfa-cli show github --watch
  MFA_CLI_CONFIG_DIR=/tmp/mfa mfa-cli profile list
"""

import argparse
import logging
import sys
import time

from mfa_core.errors import MfaError
from mfa_database.location import resolve_store_location
from mfa_database.profile_manager import ProfileManager

logger = logging.getLogger(__name__)

EXIT_OK = 0
WATCH_INTERVAL = 1  # seconds between refreshes in --watch mode


# --- CLI command handlers ---
def cmd_profile_add(manager, args) -> int:
    manager.register(args.name, args.secret)
    print(f"[+] Added new profile: {args.name}")
    return EXIT_OK


def cmd_profile_list(manager, args) -> int:
    for name in manager.list():
        print(name)
    return EXIT_OK


def cmd_profile_remove(manager, args) -> int:
    manager.remove(args.name)
    print(f"[+] Removed profile: {args.name}")
    return EXIT_OK


def cmd_show(manager, args) -> int:
    if not args.watch:
        print(manager.get_code(args.name))
        return EXIT_OK

    try:
        while True:
            code = manager.get_code(args.name)
            print(f"\r{code}", end="", flush=True)
            time.sleep(WATCH_INTERVAL)
    except KeyboardInterrupt:
        print()
    return EXIT_OK


def cmd_serve(manager, args) -> int:
    from mfa_backend.app import run

    run(manager, host=args.host, port=args.port)
    return EXIT_OK


def cmd_help(parser):
    def handler(manager, args) -> int:
        parser.print_help()
        return EXIT_OK
    return handler


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mfa-cli", description="TOTP code generator with local profiles")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose (debug) logging")
    p.add_argument("--config-dir", help="Directory holding the profile file (overrides MFA_CLI_CONFIG_DIR)")
    p.set_defaults(func=cmd_help(p), needs_store=False)
    sub = p.add_subparsers(dest="cmd")

    # profile
    pp = sub.add_parser("profile", help="Profile settings")
    pp.set_defaults(func=cmd_help(pp), needs_store=False)
    sub_p = pp.add_subparsers(dest="profile_cmd")

    ppa = sub_p.add_parser("add", help="Add a new profile")
    ppa.add_argument("name", help="Profile name (3-20 chars: alphabet, number, @ - _)")
    ppa.add_argument("secret", help="Base32 secret")
    ppa.set_defaults(func=cmd_profile_add, needs_store=True)

    ppl = sub_p.add_parser("list", help="List profile names")
    ppl.set_defaults(func=cmd_profile_list, needs_store=True)

    ppr = sub_p.add_parser("remove", help="Remove a profile")
    ppr.add_argument("name", help="Profile name")
    ppr.set_defaults(func=cmd_profile_remove, needs_store=True)

    # show
    ps = sub.add_parser("show", help="Show the TOTP code for a profile")
    ps.add_argument("name", help="Profile name")
    ps.add_argument("-w", "--watch", action="store_true", help="Refresh the code every second until Ctrl+C")
    ps.set_defaults(func=cmd_show, needs_store=True)

    # serve
    pv = sub.add_parser("serve", help="Run the local profile API")
    pv.add_argument("--host", default="127.0.0.1")
    pv.add_argument("--port", type=int, default=5000)
    pv.set_defaults(func=cmd_serve, needs_store=True)

    return p


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def main(argv=None, environ=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.needs_store:
        return args.func(None, args)

    try:
        location = resolve_store_location(environ=environ, override=args.config_dir)
        manager = ProfileManager(location)
        return args.func(manager, args)
    except MfaError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"[!] {e}", file=sys.stderr)
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
