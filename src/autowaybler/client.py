"""High-level async client for the Waybler charging API."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import aiohttp
from pydantic import ValidationError

from autowaybler._api.login import login
from autowaybler._api.sessions import create_charge_session
from autowaybler._feed import FeedMessage, WayblerFeed
from autowaybler._transport import HttpTransport
from autowaybler.config import WayblerConfig
from autowaybler.exceptions import WayblerError, WayblerParseError
from autowaybler.models.session import CreateChargeSessionRequest, CreateChargeSessionResponse
from autowaybler.models.token import AuthToken
from autowaybler.models.zone import CHARGE_ZONE_MODEL_TYPE, ChargeZone, PriceListEntry
from autowaybler.state.store import ZoneStore

_logger = logging.getLogger(__name__)


class WayblerClient:
    """Async client owning one authenticated session and one push feed.

    Usage::

        async with WayblerClient(config) as client:
            await client.initialize()
            if client.is_vehicle_connected():
                ...

    Leaving the ``async with`` block always closes the feed.
    """

    def __init__(
        self,
        config: WayblerConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        store: ZoneStore | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: HttpTransport | None = None
        self._feed: WayblerFeed | None = None
        self._auth: AuthToken | None = None
        self._store = store if store is not None else ZoneStore()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> WayblerClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        self._feed = WayblerFeed(
            self._config,
            self._http_session,
            on_message=self._on_feed_message,
            logger=_logger,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        try:
            await self.disconnect()
        finally:
            if not self._external_session and self._http_session is not None:
                await self._http_session.close()
                self._http_session = None
            self._transport = None
            self._feed = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Log in, open the push feed, and wait for the initial state."""
        transport = self._require_transport()
        self._auth = await login(self._config, transport)
        await self._require_feed().connect(self._auth.token)
        _logger.debug("Feed delivered %d zone(s) before ready", len(self._store))

    async def disconnect(self) -> None:
        """Close the push feed. No-op when already closed."""
        if self._feed is not None:
            await self._feed.close()

    @property
    def store(self) -> ZoneStore:
        return self._store

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> HttpTransport:
        if self._transport is None:
            raise WayblerError("Client not initialized. Use 'async with WayblerClient(...) as client:'")
        return self._transport

    def _require_feed(self) -> WayblerFeed:
        if self._feed is None:
            raise WayblerError("Client not initialized. Use 'async with WayblerClient(...) as client:'")
        return self._feed

    def _require_auth(self) -> AuthToken:
        if self._auth is None:
            raise WayblerError("Not logged in. Call initialize() first.")
        return self._auth

    def _on_feed_message(self, message: FeedMessage) -> None:
        """Apply a feed message to the zone store (runs on the listener task)."""
        if message.model_type != CHARGE_ZONE_MODEL_TYPE:
            _logger.debug("Ignoring feed message modelType=%s", message.model_type)
            return
        try:
            zone = ChargeZone.model_validate(message.payload)
        except ValidationError as exc:
            raise WayblerParseError(f"Invalid {CHARGE_ZONE_MODEL_TYPE}: {exc}") from exc
        self._store.apply(zone)
        _logger.debug("Zone %s updated (%s)", zone.zone_id, zone.name)

    # ------------------------------------------------------------------
    # Snapshot queries
    # ------------------------------------------------------------------

    def is_vehicle_connected(self) -> bool:
        """Whether any station has a vehicle plugged in (connected or charging)."""
        return self._store.is_vehicle_connected()

    def is_charging(self) -> bool:
        """Whether any station is currently charging."""
        return self._store.is_charging()

    def get_lowest_price(self, window_hours: float, *, now: datetime | None = None) -> PriceListEntry | None:
        """Cheapest VAT-inclusive price within the next *window_hours*."""
        return self._store.lowest_price(window_hours, now=now)

    # ------------------------------------------------------------------
    # Write command
    # ------------------------------------------------------------------

    async def start_charging(self, price_limit: float) -> CreateChargeSessionResponse | None:
        """Start a session on the first station with a connected, idle vehicle.

        *price_limit* is the pre-VAT spot price ceiling. Returns ``None``
        when no station is eligible. Each call creates a real session on
        the vendor side.
        """
        target = self._store.first_connected_station()
        if target is None:
            return None
        zone, station = target

        request = CreateChargeSessionRequest(
            station_id=station.station_id,
            contract_user_id=zone.contract_user_id,
            spot_price_limit=price_limit,
        )
        return await create_charge_session(self._require_transport(), self._require_auth(), request)
