"""autowaybler - price-driven EV charging for Waybler stations."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("autowaybler")
except PackageNotFoundError:
    __version__ = "0+local"
from autowaybler.charge import ChargeOutcome, run_charge_cycle
from autowaybler.client import WayblerClient
from autowaybler.config import ChargeConfig, WayblerConfig
from autowaybler.exceptions import (
    WayblerApiError,
    WayblerAuthenticationError,
    WayblerConfigError,
    WayblerConnectionError,
    WayblerError,
    WayblerParseError,
)
from autowaybler.models import (
    AuthToken,
    ChargeZone,
    ConsumptionFee,
    CreateChargeSessionResponse,
    PriceListEntry,
    Station,
    StationGroup,
    StationState,
)
from autowaybler.scheduler import ChargeScheduler

__all__ = [
    "__version__",
    "AuthToken",
    "ChargeConfig",
    "ChargeOutcome",
    "ChargeScheduler",
    "ChargeZone",
    "ConsumptionFee",
    "CreateChargeSessionResponse",
    "PriceListEntry",
    "Station",
    "StationGroup",
    "StationState",
    "WayblerApiError",
    "WayblerAuthenticationError",
    "WayblerClient",
    "WayblerConfig",
    "WayblerConfigError",
    "WayblerConnectionError",
    "WayblerError",
    "WayblerParseError",
    "run_charge_cycle",
]
