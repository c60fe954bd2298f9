"""Argument parsing, configuration loading, and daemon bootstrap."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import load_config
from .daemon import Daemon
from .exceptions import ConfigError, SyncError
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nginx-upstream-sync",
        description="Keeps an nginx upstream block in sync with Kubernetes pod hosts",
    )
    parser.add_argument(
        "-c", "--config",
        required=True,
        help="Path to the YAML configuration file",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single reconciliation cycle and exit",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate the configuration file and template, then exit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load config (minimal logging until config is loaded)
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    configure_logging(config.logging)

    if args.validate:
        try:
            Daemon.load_renderer(config)
        except SyncError as exc:
            logger.error("Invalid template: %s", exc)
            return 1
        logger.info("Configuration is valid")
        return 0

    try:
        daemon = Daemon(config)
    except SyncError as exc:
        logger.error("Fatal error: %s", exc)
        return 1

    try:
        if args.once:
            logger.info("Running single reconciliation cycle (--once)")
            outcome = daemon.run_once()
            return 1 if outcome.failed else 0
        daemon.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0

    return 0
