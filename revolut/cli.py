"""Command line helpers for the one-off OAuth consent dance.

    python -m revolut authorize-url
    python -m revolut exchange <code>      # prints JSON for REVOLUT_AUTH_JSON
    python -m revolut refresh
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Optional, Sequence

import revolut

from .configuration import load_env
from .errors import Error
from .logging import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m revolut", description=__doc__.splitlines()[0])
    parser.add_argument("--log-format", choices=("text", "json"), default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    url = sub.add_parser("authorize-url", help="print the consent URL for the business owner")
    url.add_argument("--state", default=None)

    exchange = sub.add_parser("exchange", help="trade an authorization code for tokens")
    exchange.add_argument("code")

    sub.add_parser("refresh", help="force a token refresh using REVOLUT_AUTH_JSON / REVOLUT_AUTH_FILE")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_format, service_name="revolut-cli", stream=sys.stderr)
    if load_env():
        # configuration was resolved at import time, before .env was read
        revolut.reset()
    try:
        revolut.auth.load_from_env()
        if args.command == "authorize-url":
            print(revolut.auth.authorize_url(state=args.state))
        elif args.command == "exchange":
            print(json.dumps(revolut.auth.exchange(args.code), indent=2))
        elif args.command == "refresh":
            revolut.auth.refresh(force=True)
            print(json.dumps(revolut.auth.to_dict(), indent=2))
    except Error as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
