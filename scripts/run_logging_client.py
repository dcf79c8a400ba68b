#!/usr/bin/env python3
"""
Logging client.

Connects to TWS or IB Gateway, subscribes to the account summary and logs
every event until interrupted.

Requirements:
    1. pip install -e .
    2. TWS or IB Gateway running with API enabled on port 7497 (paper)

Usage:
    python scripts/run_logging_client.py              # TWS paper (default)
    python scripts/run_logging_client.py --live       # TWS live (port 7496)
    python scripts/run_logging_client.py --gateway    # IB Gateway paper (port 4002)
    python scripts/run_logging_client.py --port 7497  # Custom port
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys

from ibwire import Client, ConnError, IBConfig, IBPort, LoggingWrapper


ACCOUNT_SUMMARY_REQ_ID = 9001
ACCOUNT_SUMMARY_TAGS = "NetLiquidation,TotalCashValue,BuyingPower"


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Connect to TWS / IB Gateway and log every event",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Port Reference:
  7497  TWS Paper Trading (default)
  7496  TWS Live Trading
  4002  IB Gateway Paper
  4001  IB Gateway Live
        """,
    )
    parser.add_argument(
        "--live",
        action="store_true",
        help="Use live trading port (7496 for TWS, 4001 for Gateway)",
    )
    parser.add_argument(
        "--gateway",
        action="store_true",
        help="Use IB Gateway ports instead of TWS",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Override port (default: auto-select based on --live/--gateway)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="TWS/Gateway host (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--client-id",
        type=int,
        default=1,
        help="Client ID sent in the start-API message (default: 1)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Handshake timeout in seconds (default: 10)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


def select_port(args: argparse.Namespace) -> int:
    if args.port:
        return args.port
    if args.gateway:
        return IBPort.GATEWAY_LIVE if args.live else IBPort.GATEWAY_PAPER
    return IBPort.TWS_LIVE if args.live else IBPort.TWS_PAPER


async def run(args: argparse.Namespace) -> int:
    """Connect, subscribe and log until the connection closes."""
    config = IBConfig(
        host=args.host,
        port=select_port(args),
        client_id=args.client_id,
        timeout=args.timeout,
    )

    mode = "PAPER" if config.is_paper else "LIVE"
    conn_type = "IB Gateway" if config.is_gateway else "TWS"
    logging.info(
        "Connecting to %s %s at %s:%d (client_id=%d)",
        conn_type,
        mode,
        config.host,
        int(config.port),
        config.client_id,
    )

    wrapper = LoggingWrapper()
    client = Client(wrapper, config)
    wrapper.client = client

    try:
        await client.connect()
    except ConnError as e:
        logging.error("Connection failed: %s", e)
        return 1

    try:
        await client.wait_until_ready(timeout=config.timeout)
        client.req_account_summary(ACCOUNT_SUMMARY_REQ_ID, "All", ACCOUNT_SUMMARY_TAGS)
        await client.wait_closed()
    except TimeoutError:
        logging.error("Gateway did not send a next valid order id within %.0fs", config.timeout)
        return 1
    finally:
        client.disconnect()
        await client.wait_closed()

    logging.info("Stats: %s", client.stats)
    return 0


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    with contextlib.suppress(KeyboardInterrupt):
        sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
