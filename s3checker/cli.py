#!/usr/bin/env python
"""Command-line entry point for s3checker.

Checks S3 bucket access and the privileges required by CockroachDB cloud
operations (backup, restore, import, export, changefeeds).

Usage:
  s3checker --bucket my-bucket
  s3checker --bucket my-bucket --auth explicit --key-id AKIA... --access-key ...
  python -m s3checker --bucket my-bucket --sdk-version 2 --debug

Exit Codes:
  0 - Report printed (individual probes may still have failed)
  1 - Fatal check failure (authentication, caller identity, bucket region)
  2 - Invalid arguments or configuration
"""
from __future__ import annotations
import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .checker import run_check
from .config import AuthMode, load_settings
from .exceptions import ConfigurationError, S3CheckerError
from .logging_config import setup_logging
from .report import print_report, use_color

logger = logging.getLogger("s3checker")

EXIT_OK = 0
EXIT_CHECK_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3checker",
        description=(
            "s3checker checks for S3 bucket access and privileges required by "
            "CockroachDB cloud operations."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--bucket", default=None, help="S3 bucket (or S3CHECKER_BUCKET)")
    parser.add_argument(
        "--auth", choices=[m.value for m in AuthMode], default=None,
        help="Auth type: implicit or explicit (default implicit)",
    )
    parser.add_argument("--key-id", default=None, help="AWS access key ID, when using explicit auth")
    parser.add_argument("--access-key", default=None, help="AWS secret access key, when using explicit auth")
    parser.add_argument(
        "--session-token", default=None,
        help="AWS session token, when using explicit auth and STS temporary credentials",
    )
    parser.add_argument("--region", default=None, help="AWS region, optional")
    parser.add_argument(
        "--debug", action="store_true", default=None,
        help="Include debug output for requests, responses and signing",
    )
    parser.add_argument(
        "--sdk-version", type=int, choices=[1, 2], default=None,
        help="Probe backend: 1 = managed transfers, 2 = low-level client calls (default 1)",
    )
    parser.add_argument("--no-color", action="store_true", default=None, help="Disable colored output")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    # Mirror cobra's MarkFlagsRequiredTogether before any settings/AWS work
    if bool(args.key_id) != bool(args.access_key):
        parser.error("--key-id and --access-key must be supplied together")
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    setup_logging()
    try:
        args = parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else EXIT_USAGE

    try:
        settings = load_settings(
            bucket=args.bucket,
            auth=args.auth,
            key_id=args.key_id,
            access_key=args.access_key,
            session_token=args.session_token,
            region=args.region,
            debug=args.debug,
            sdk_version=args.sdk_version,
            no_color=args.no_color,
        )
    except ConfigurationError as e:
        logger.error("Invalid configuration", extra={"error_type": e.error_type, "context": e.context})
        print(f"s3checker: configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(settings.log_level if not settings.debug else "DEBUG", settings.log_format)

    try:
        report = run_check(settings)
    except ConfigurationError as e:
        print(f"s3checker: configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except S3CheckerError as e:
        logger.error("Check aborted", extra={"error_type": e.error_type, "context": e.context})
        print(f"s3checker: {e}", file=sys.stderr)
        return EXIT_CHECK_FAILED

    print_report(report, color=use_color(settings.no_color))
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
