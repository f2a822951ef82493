"""Shelly updater entry point.

Usage::

    python -m shelly_updater [--username USER] [--password PASS]
                             [--stage {stable,beta}] [--gen {0,1,2}]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from shelly_updater.config import GENERATIONS, STAGES, UpdaterConfig
from shelly_updater.discovery import DiscoveryError
from shelly_updater.runner import ScanRunner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shelly-updater",
        description="Discover Shelly devices via mDNS and update their firmware",
    )
    parser.add_argument(
        "--username",
        default=None,
        help="username to use for authentication (default: $SHELLY_USERNAME or admin)",
    )
    parser.add_argument(
        "--password",
        default=None,
        help="password to use for authentication (default: $SHELLY_PASSWORD)",
    )
    parser.add_argument(
        "--stage",
        default="stable",
        choices=STAGES,
        help="stable or beta",
    )
    parser.add_argument(
        "--gen",
        type=int,
        default=0,
        choices=GENERATIONS,
        help="device generation to update (default: all)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=60.0,
        help="mDNS scan timeout in seconds (default: 60)",
    )
    parser.add_argument(
        "--prefix",
        default="shelly",
        help="only update devices whose mDNS name starts with this (default: shelly)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = UpdaterConfig.from_env(
        username=args.username,
        password=args.password,
        stage=args.stage,
        generation=args.gen,
        scan_timeout=args.timeout,
        name_prefix=args.prefix,
    )
    if config.use_auth:
        logger.info("Using basic authentication: %s:*******", config.username)

    try:
        asyncio.run(ScanRunner(config).run())
    except DiscoveryError as exc:
        logger.critical("Failed to browse: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.warning("scan cancelled")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
