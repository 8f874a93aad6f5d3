"""Charge zone snapshot models.

Mapped from the ``ChargeZoneModel`` push-feed message.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated

from pydantic import BeforeValidator, Field

from autowaybler.models._base import WayblerBaseModel, WayblerEnum, WayblerTimestamp

CHARGE_ZONE_MODEL_TYPE = "ChargeZoneModel"


class StationState(WayblerEnum):
    """Connectivity/activity state of a single charging point."""

    EV_CONNECTED = "EvConnected"
    BUSY = "Busy"
    OK = "Ok"
    UNKNOWN = "Unknown"


class Station(WayblerBaseModel):
    """An individual charging point."""

    station_id: int
    name: str = ""
    state: Annotated[StationState, BeforeValidator(StationState)] = StationState.UNKNOWN

    @property
    def is_vehicle_connected(self) -> bool:
        """A vehicle is plugged in, whether or not it is drawing power."""
        return self.state in (StationState.EV_CONNECTED, StationState.BUSY)

    @property
    def is_charging(self) -> bool:
        return self.state is StationState.BUSY


class StationGroup(WayblerBaseModel):
    name: str = ""
    stations: list[Station] = Field(default_factory=list)


class ConsumptionFee(WayblerBaseModel):
    """Fee breakdown for one price slot.

    ``value`` is the pre-VAT price sent back to the vendor as a session
    price limit; ``total`` is the VAT-inclusive consumer price.
    """

    currency: str = ""
    vat: float = 0.0
    value: float
    total: float


class PriceListEntry(WayblerBaseModel):
    at: WayblerTimestamp
    consumption_fee: ConsumptionFee


class ChargeZone(WayblerBaseModel):
    """A group of stations sharing a price list and contract user."""

    zone_id: int
    name: str = ""
    contract_user_id: int
    station_groups: list[StationGroup] = Field(default_factory=list)
    is_variable_price_zone: bool = False
    spot_price_limit: float | None = None
    price_list: list[PriceListEntry] = Field(default_factory=list)
    currency: str = ""

    def iter_stations(self) -> Iterator[Station]:
        """Yield stations in group order."""
        for group in self.station_groups:
            yield from group.stations
