"""Client and scheduling configuration for autowaybler."""

from __future__ import annotations

import dataclasses
import math
import os
from collections.abc import Mapping
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter

from autowaybler._constants import (
    APP_UUID,
    BASE_URL,
    DEFAULT_CRON,
    DEFAULT_LOOK_AHEAD_HOURS,
    DEFAULT_MAX_SPOT_PRICE,
    DEFAULT_TIME_ZONE,
    FEED_READY_TIMEOUT,
    MAX_LOOK_AHEAD_HOURS,
    WEBSOCKET_URL,
)
from autowaybler.exceptions import WayblerConfigError


def _positive_float(name: str, raw: str | float) -> float:
    """Parse *raw* as a positive finite number or raise :class:`WayblerConfigError`."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise WayblerConfigError(f"{name} must be a positive number, got {raw!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise WayblerConfigError(f"{name} must be a positive number, got {raw!r}")
    return value


@dataclasses.dataclass(frozen=True)
class WayblerConfig:
    """Vendor client configuration.

    Parameters
    ----------
    username : str
        Waybler account email.
    password : str
        Waybler account password.
    base_url : str
        REST API base URL.
    websocket_url : str
        Push-feed URL (without query string).
    app_uuid : str
        Application identifier sent with every request.
    feed_ready_timeout : float
        Seconds to wait for the feed's readiness signal after connecting.
    """

    username: str
    password: str = dataclasses.field(repr=False)
    base_url: str = BASE_URL
    websocket_url: str = WEBSOCKET_URL
    app_uuid: str = APP_UUID
    feed_ready_timeout: float = FEED_READY_TIMEOUT


@dataclasses.dataclass(frozen=True)
class ChargeConfig:
    """Settings for one charge evaluation cycle and its schedule.

    ``look_ahead_hours`` is clamped to :data:`MAX_LOOK_AHEAD_HOURS` on
    construction; non-positive or non-finite numbers are rejected.
    """

    waybler: WayblerConfig
    cron_expression: str = DEFAULT_CRON
    time_zone: str = DEFAULT_TIME_ZONE
    look_ahead_hours: float = DEFAULT_LOOK_AHEAD_HOURS
    max_spot_price: float = DEFAULT_MAX_SPOT_PRICE

    def __post_init__(self) -> None:
        hours = _positive_float("LOOK_AHEAD_HOURS", self.look_ahead_hours)
        object.__setattr__(self, "look_ahead_hours", min(hours, MAX_LOOK_AHEAD_HOURS))
        object.__setattr__(self, "max_spot_price", _positive_float("MAX_SPOT_PRICE", self.max_spot_price))

        if not croniter.is_valid(self.cron_expression):
            raise WayblerConfigError(f"CRON is not a valid cron expression: {self.cron_expression!r}")
        try:
            ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, ValueError):
            raise WayblerConfigError(f"TZ is not a known time zone: {self.time_zone!r}") from None

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides: Any) -> ChargeConfig:
        """Create configuration from environment variables.

        Reads ``WAYBLER_EMAIL`` and ``WAYBLER_PASSWORD`` (required) plus the
        optional ``CRON``, ``TZ``, ``LOOK_AHEAD_HOURS`` and ``MAX_SPOT_PRICE``.
        Explicit keyword arguments override environment values; a
        ``waybler`` override may be a :class:`WayblerConfig` or a dict of
        its fields.

        Raises
        ------
        WayblerConfigError
            When credentials are missing or a setting is invalid.
        """
        env = os.environ if env is None else env

        waybler_overrides = overrides.pop("waybler", None)
        if isinstance(waybler_overrides, WayblerConfig):
            waybler = waybler_overrides
        else:
            waybler_kwargs: dict[str, Any] = {
                "username": env.get("WAYBLER_EMAIL", ""),
                "password": env.get("WAYBLER_PASSWORD", ""),
            }
            if isinstance(waybler_overrides, dict):
                waybler_kwargs.update(waybler_overrides)
            if not waybler_kwargs["username"] or not waybler_kwargs["password"]:
                raise WayblerConfigError("Missing required env vars: WAYBLER_EMAIL and WAYBLER_PASSWORD")
            waybler = WayblerConfig(**waybler_kwargs)

        _ENV_CONFIG_MAP = {
            "CRON": "cron_expression",
            "TZ": "time_zone",
            "LOOK_AHEAD_HOURS": "look_ahead_hours",
            "MAX_SPOT_PRICE": "max_spot_price",
        }
        config_kwargs: dict[str, Any] = {"waybler": waybler}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
