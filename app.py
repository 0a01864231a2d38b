"""
app.py

Responsibility: Process entry point — parses the command line, loads config,
installs signal handlers, and runs the reconcile scheduler until shutdown.
Does NOT: contain DNS business logic or talk to any API directly.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional

from config import AppConfig, load_config
from dependencies import create_http_client, get_reconcile_service
from exceptions import ConfigLoadError
from logger import configure_logging
from scheduler import run_until_cancelled

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Keep Cloudflare A records pointed at this host's public IP."
    )
    parser.add_argument("--config", help="Path to the JSON config file (default: config/config.json)")
    parser.add_argument("--interval", type=int, help="Seconds between update passes (default: 30)")
    parser.add_argument(
        "--limit-to-domain",
        dest="limit_to_domain",
        help="Only manage records whose name ends with this domain",
    )
    parser.add_argument("--log-level", dest="log_level", help="Log level (default: INFO)")
    return parser.parse_args(argv)


def _request_shutdown(cancel: asyncio.Event, signum: int) -> None:
    logger.info("Received %s, shutting down...", signal.Signals(signum).name)
    cancel.set()


async def run(config: AppConfig, cancel: Optional[asyncio.Event] = None) -> None:
    """
    Runs the daemon until the cancel event is set (by SIGINT/SIGTERM or the
    caller).

    Args:
        config: The frozen application configuration.
        cancel: Optional externally owned shutdown event.

    Returns:
        None
    """
    if cancel is None:
        cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, _request_shutdown, cancel, signum)

    logger.info("🟢 DNS updater started.")
    try:
        async with create_http_client(config) as http_client:
            reconciler = get_reconcile_service(config, http_client)
            await run_until_cancelled(reconciler, cancel, config.interval)
    finally:
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(signum)
    logger.info("DNS updater stopped.")


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    # Log to stdout until the configured level/file are known
    configure_logging(args.log_level or "INFO")

    try:
        config = load_config(
            path=args.config,
            overrides={
                "interval": args.interval,
                "limit_to_domain": args.limit_to_domain,
                "log_level": args.log_level,
            },
        )
    except ConfigLoadError as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG_ERROR

    configure_logging(config.log_level, config.log_file)
    asyncio.run(run(config))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
