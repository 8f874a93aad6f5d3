"""Data models for Waybler API payloads."""

from autowaybler.models._base import WayblerBaseModel, WayblerEnum, WayblerTimestamp, parse_waybler_timestamp
from autowaybler.models.session import CreateChargeSessionRequest, CreateChargeSessionResponse
from autowaybler.models.token import AuthToken
from autowaybler.models.zone import (
    CHARGE_ZONE_MODEL_TYPE,
    ChargeZone,
    ConsumptionFee,
    PriceListEntry,
    Station,
    StationGroup,
    StationState,
)

__all__ = [
    "AuthToken",
    "CHARGE_ZONE_MODEL_TYPE",
    "ChargeZone",
    "ConsumptionFee",
    "CreateChargeSessionRequest",
    "CreateChargeSessionResponse",
    "PriceListEntry",
    "Station",
    "StationGroup",
    "StationState",
    "WayblerBaseModel",
    "WayblerEnum",
    "WayblerTimestamp",
    "parse_waybler_timestamp",
]
