"""In-memory snapshot of charge zones delivered by the push feed.

The feed listener is the only writer. Everything else reads through the
query methods, which never mutate the snapshot.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

from autowaybler.models.zone import ChargeZone, PriceListEntry, Station, StationState


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ZoneStore:
    """Last-write-wins store keyed by zone id.

    A zone message replaces the stored zone wholesale; partial updates
    are not reconciled.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._zones: dict[int, ChargeZone] = {}

    def __len__(self) -> int:
        return len(self._zones)

    def apply(self, zone: ChargeZone) -> None:
        """Replace the snapshot entry for ``zone.zone_id``."""
        self._zones[zone.zone_id] = zone

    def clear(self) -> None:
        self._zones.clear()

    def get_zone(self, zone_id: int) -> ChargeZone | None:
        return self._zones.get(zone_id)

    @property
    def zones(self) -> tuple[ChargeZone, ...]:
        return tuple(self._zones.values())

    def iter_stations(self) -> Iterator[tuple[ChargeZone, Station]]:
        """Yield ``(zone, station)`` pairs in zone, group, station order."""
        for zone in self._zones.values():
            for station in zone.iter_stations():
                yield zone, station

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_vehicle_connected(self) -> bool:
        return any(station.is_vehicle_connected for _, station in self.iter_stations())

    def is_charging(self) -> bool:
        return any(station.is_charging for _, station in self.iter_stations())

    def lowest_price(self, window_hours: float, *, now: datetime | None = None) -> PriceListEntry | None:
        """Cheapest entry (by VAT-inclusive total) with ``now <= at <= now + window_hours``.

        Ties keep the first entry encountered.
        """
        start = now if now is not None else self._clock()
        cutoff = start + timedelta(hours=window_hours)

        lowest: PriceListEntry | None = None
        for zone in self._zones.values():
            for entry in zone.price_list:
                if not start <= entry.at <= cutoff:
                    continue
                if lowest is None or entry.consumption_fee.total < lowest.consumption_fee.total:
                    lowest = entry
        return lowest

    def first_connected_station(self) -> tuple[ChargeZone, Station] | None:
        """First station with a plugged-in vehicle that is not already charging."""
        for zone, station in self.iter_stations():
            if station.state is StationState.EV_CONNECTED:
                return zone, station
        return None
