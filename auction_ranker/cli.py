"""Command-line interface for the auction ranker."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from decimal import Decimal

from .chains.defichain import DefichainClient
from .config import load_config
from .errors import ConfigurationMissing
from .logging_setup import DEFAULT_LOG_DIR, configure_logging
from .server import run_server
from .services import AuctionReportService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="auction-ranker",
        description="Rank DeFiChain loan auctions by profitability margin",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root, else environment)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Serve the ranked auction list over HTTP")

    report_parser = sub.add_parser("report", help="Print the ranked auction list once")
    report_parser.add_argument(
        "limit", type=int, help="Number of open auction batches to fetch"
    )
    report_parser.add_argument(
        "--min-margin",
        type=Decimal,
        default=None,
        help="Minimum margin percentage (overrides config)",
    )

    return parser


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level or "INFO", DEFAULT_LOG_DIR)
    try:
        config = load_config(args.config)
    except ConfigurationMissing as e:
        logger.error("MISSING REQUIRED CONFIG SETTING: %s", e.setting)
        sys.exit(1)
    except (ValueError, FileNotFoundError) as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)

    configure_logging(args.log_level or config.logging.level, config.logging.directory or None)

    if args.command == "serve":
        await run_server(config)
    elif args.command == "report":
        service = AuctionReportService(DefichainClient(config.rpc), config)
        auctions = await service.render_report(args.limit, args.min_margin)
        print(json.dumps(auctions, indent=2))
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
