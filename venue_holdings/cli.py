"""Command-line interface for venue holdings valuation."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from .config import AppConfig, load_config
from .errors import ValuationError
from .logging_setup import configure_logging
from .protocols import supported_protocols
from .services import build_service

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="venue-holdings",
        description="Value bid positions across Cosmos DeFi venues",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    holdings_parser = sub.add_parser(
        "holdings", help="Print venue holdings as JSON (all bids if no id)"
    )
    holdings_parser.add_argument(
        "bid_id",
        nargs="?",
        type=int,
        default=None,
        help="Bid to value",
    )

    sub.add_parser("bids", help="List configured bids and their venues")

    experimental_parser = sub.add_parser(
        "experimental",
        help="Print experimental deployment holdings as JSON (all if no id)",
    )
    experimental_parser.add_argument(
        "experimental_id",
        nargs="?",
        type=int,
        default=None,
        help="Deployment to value",
    )

    return parser


def _describe_bids(config: AppConfig) -> list[dict[str, Any]]:
    supported = set(supported_protocols())
    return [
        {
            "bid_id": bid.bid_id,
            "initial_atom_allocation": bid.initial_atom_allocation,
            "venues": [
                {
                    "protocol": venue.protocol,
                    "pool_id": venue.pool_id,
                    "address": venue.address,
                    "supported": venue.protocol in supported,
                }
                for venue in bid.venues
            ],
        }
        for bid in sorted(config.bids.values(), key=lambda b: b.bid_id)
    ]


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command; returns the process exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "bids":
        _print_json(_describe_bids(config))
        return 0

    if args.command == "holdings":
        service = build_service(config)
        if args.bid_id is None:
            bids = await service.compute_all_bids()
            _print_json([b.to_dict() for b in bids])
            return 0
        try:
            venues = await service.compute_bid_holdings(args.bid_id)
        except ValuationError as e:
            logger.error("%s", e)
            return 1
        _print_json([v.to_dict() for v in venues])
        return 0

    if args.command == "experimental":
        service = build_service(config)
        if args.experimental_id is None:
            deployments = await service.compute_all_experimental()
            _print_json([d.to_dict() for d in deployments])
            return 0
        try:
            deployment = await service.compute_experimental(args.experimental_id)
        except ValuationError as e:
            logger.error("%s", e)
            return 1
        _print_json(deployment.to_dict())
        return 0

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
