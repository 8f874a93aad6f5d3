"""One charge evaluation cycle.

Connects, inspects the zone snapshot, and starts a session when the
cheapest price in the look-ahead window is acceptable.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from typing import Any

from autowaybler.client import WayblerClient
from autowaybler.config import ChargeConfig, WayblerConfig

_logger = logging.getLogger(__name__)


class ChargeOutcome(enum.Enum):
    """How a cycle ended."""

    NO_VEHICLE = "no_vehicle"
    ALREADY_CHARGING = "already_charging"
    NO_PRICE_DATA = "no_price_data"
    PRICE_TOO_HIGH = "price_too_high"
    NO_ELIGIBLE_STATION = "no_eligible_station"
    STARTED = "started"


async def run_charge_cycle(
    config: ChargeConfig,
    *,
    client_factory: Callable[[WayblerConfig], Any] = WayblerClient,
) -> ChargeOutcome:
    """Run a single evaluation cycle.

    Errors (authentication, feed, API) propagate to the caller; the feed
    is closed on every path.
    """
    _logger.info("Running scheduled charge...")
    hours = config.look_ahead_hours

    async with client_factory(config.waybler) as client:
        await client.initialize()

        if not client.is_vehicle_connected():
            _logger.info("No vehicle plugged in. Skipping.")
            return ChargeOutcome.NO_VEHICLE

        if client.is_charging():
            _logger.info("Already charging. Skipping.")
            return ChargeOutcome.ALREADY_CHARGING

        lowest = client.get_lowest_price(hours)
        if lowest is None:
            _logger.info("No price data in next %sh. Skipping.", hours)
            return ChargeOutcome.NO_PRICE_DATA

        fee = lowest.consumption_fee
        _logger.info("Lowest price in next %sh: %s %s (at %s)", hours, fee.total, fee.currency, lowest.at.isoformat())

        if fee.total > config.max_spot_price:
            _logger.info("Lowest price %s exceeds max %s. Skipping.", fee.total, config.max_spot_price)
            return ChargeOutcome.PRICE_TOO_HIGH

        # The vendor expects the limit without VAT.
        result = await client.start_charging(fee.value)
        if result is None:
            _logger.info("Failed to start charging (no connected station found).")
            return ChargeOutcome.NO_ELIGIBLE_STATION

        _logger.info("Charging started. Session ID: %s, price limit: %s", result.session_id, fee.total)
        return ChargeOutcome.STARTED
