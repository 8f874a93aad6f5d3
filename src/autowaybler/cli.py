"""Process entry point: ``autowaybler`` / ``python -m autowaybler``.

Environment:
- WAYBLER_EMAIL, WAYBLER_PASSWORD (required)
- CRON, TZ, LOOK_AHEAD_HOURS, MAX_SPOT_PRICE (optional)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from collections.abc import Callable, Sequence

from autowaybler.config import ChargeConfig
from autowaybler.exceptions import WayblerConfigError
from autowaybler.scheduler import ChargeScheduler

_logger = logging.getLogger("autowaybler")

_LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="autowaybler",
        description="Start Waybler charging when the spot price drops below a threshold.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single charge cycle now and exit.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args(argv)


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, shutdown: Callable[[], None]) -> None:
    """Route SIGINT and SIGTERM to *shutdown* on the event loop.

    Event loops without ``add_signal_handler`` (Windows) get a plain
    ``signal.signal`` handler that hands off to the loop thread.
    """
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown)
        except NotImplementedError:
            signal.signal(sig, lambda _signum, _frame: loop.call_soon_threadsafe(shutdown))


async def _run(config: ChargeConfig, *, once: bool) -> int:
    scheduler = ChargeScheduler(config)
    if once:
        outcome = await scheduler.run_once()
        return 0 if outcome is not None else 1

    def shutdown() -> None:
        _logger.info("Shutting down...")
        scheduler.stop()

    _install_signal_handlers(asyncio.get_running_loop(), shutdown)

    await scheduler.run_forever()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=_LOG_FORMAT,
    )

    try:
        config = ChargeConfig.from_env()
    except WayblerConfigError as exc:
        _logger.error("%s", exc)
        return 1

    _logger.info("autowaybler starting...")
    return asyncio.run(_run(config, once=args.once))
