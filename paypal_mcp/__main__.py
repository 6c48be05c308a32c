"""Run the PayPal MCP server over stdio.

    python -m paypal_mcp            # verify credentials, then serve
    python -m paypal_mcp --check    # verify credentials and exit
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from common.logging import configure_logging
from common.metrics import maybe_start_http_server
from integrations.paypal.auth import CredentialManager
from integrations.paypal.errors import AuthError, TransientNetworkError

from . import __version__
from .config import ConfigError, Settings
from .operations import build_dispatcher
from .server import build_server

_LOG = logging.getLogger("paypal_mcp")


async def _verify(settings: Settings) -> bool:
    # separate client: the server runs on its own event loop
    async with CredentialManager.from_settings(settings) as manager:
        return await manager.verify_credentials()


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="paypal-mcp",
        description="MCP server exposing PayPal REST operations as tools",
    )
    parser.add_argument("--check", action="store_true", help="verify credentials and exit")
    parser.add_argument(
        "--skip-verify",
        action="store_true",
        help="start serving without a start-up credential check",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)

    try:
        settings = Settings.load()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level, settings.log_format, service_name="paypal-mcp")
    _LOG.info("Starting PayPal MCP server (environment=%s)", settings.environment)

    if args.check or not args.skip_verify:
        try:
            asyncio.run(_verify(settings))
        except AuthError as exc:
            _LOG.error("%s", exc.message)
            return 1
        except TransientNetworkError as exc:
            if args.check:
                _LOG.error("Could not reach PayPal: %s", exc.message)
                return 1
            _LOG.warning("Could not reach PayPal at start-up, continuing: %s", exc.message)
        if args.check:
            return 0

    maybe_start_http_server()
    dispatcher = build_dispatcher(CredentialManager.from_settings(settings))
    build_server(dispatcher).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
