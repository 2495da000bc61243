from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional

from .async_provisioner import ALIAS_ERROR_POLICIES
from .config import CONFIG_KEY, AWSConnection, load_zone_config
from .errors import HostedZoneError
from .plugin import COMMANDS, HostedZonePlugin


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create Route 53 hosted zones and CloudFront alias records."
    )
    parser.add_argument(
        "command",
        choices=list(COMMANDS),
        help="Lifecycle command to run",
    )
    parser.add_argument(
        "--config",
        default="serverless.yml",
        help="Service file (YAML or JSON) holding the hosted zone block",
    )
    parser.add_argument(
        "--config-key",
        default=CONFIG_KEY,
        help=f"Dotted path of the hosted zone block (default: {CONFIG_KEY})",
    )
    parser.add_argument(
        "--region", help="AWS region for the API clients (default: from environment)"
    )
    parser.add_argument("--profile", help="AWS credentials profile")
    parser.add_argument(
        "--endpoint-url", help="Custom AWS endpoint, e.g. a local emulator"
    )
    parser.add_argument(
        "--retries", type=int, default=3, help="Retry count for throttled API calls"
    )
    parser.add_argument(
        "--retry-backoff",
        type=float,
        default=0.5,
        help="Base backoff seconds between retries",
    )
    parser.add_argument(
        "--retry-max-backoff",
        type=float,
        default=5.0,
        help="Maximum backoff seconds between retries",
    )
    parser.add_argument(
        "--retry-jitter",
        type=float,
        default=0.1,
        help="Max random jitter seconds added to backoff",
    )
    parser.add_argument(
        "--on-alias-error",
        choices=ALIAS_ERROR_POLICIES,
        default="continue",
        help="Alias batch behavior on error: continue or stop (default: continue)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set log level",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging (alias for --log-level DEBUG)",
    )
    return parser.parse_args(argv)


def _build_connection(args: argparse.Namespace) -> AWSConnection:
    env = AWSConnection.from_env()
    return AWSConnection(
        region=args.region or env.region,
        profile=args.profile or env.profile,
        endpoint_url=args.endpoint_url or env.endpoint_url,
    )


async def _run(args: argparse.Namespace) -> int:
    try:
        config = load_zone_config(args.config, args.config_key)
    except HostedZoneError as exc:
        logging.error("%s", exc)
        return 1

    plugin = HostedZonePlugin(
        config,
        _build_connection(args),
        on_alias_error=args.on_alias_error,
        retries=args.retries,
        retry_backoff=args.retry_backoff,
        retry_max_backoff=args.retry_max_backoff,
        retry_jitter=args.retry_jitter,
    )
    try:
        await plugin.run(args.command)
    except HostedZoneError as exc:
        logging.error("%s", exc)
        return 1
    finally:
        try:
            await asyncio.shield(plugin.close())
        except asyncio.CancelledError:
            pass
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    level_name = args.log_level or ("DEBUG" if args.verbose else "INFO")
    level = getattr(logging, level_name)

    logger = logging.getLogger()
    logger.setLevel(level)
    formatter = logging.Formatter("[%(levelname)s] %(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(lambda record: record.levelno < logging.CRITICAL)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.CRITICAL)
    stderr_handler.setFormatter(formatter)

    logger.handlers.clear()
    logger.addHandler(stdout_handler)
    logger.addHandler(stderr_handler)

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        logging.warning("Interrupted by user.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
