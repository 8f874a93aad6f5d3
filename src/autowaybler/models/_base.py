"""Base model and enum for Waybler API payloads.

Every vendor model inherits from :class:`WayblerBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``null`` and NaN
  values so the field default is used.
* A ``raw`` dict that captures the original payload, so fields the
  vendor adds later remain reachable.

State enums inherit from :class:`WayblerEnum` which resolves any
value without a mapped member to ``UNKNOWN``.
"""

from __future__ import annotations

import enum
import math
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def parse_waybler_timestamp(value: Any) -> Any:
    """Coerce an ISO-8601 vendor timestamp to an aware datetime.

    Values without an offset are read as UTC. Anything that is not a
    string or datetime is passed through for pydantic to reject.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


WayblerTimestamp = Annotated[datetime, BeforeValidator(parse_waybler_timestamp)]
"""Annotated type for vendor ISO timestamps, always timezone-aware."""


class WayblerEnum(enum.StrEnum):
    """Base for vendor state enums.

    Every subclass **must** define ``UNKNOWN``.
    """

    @classmethod
    def _missing_(cls, value: object) -> WayblerEnum:
        unknown: WayblerEnum = cls["UNKNOWN"]
        return unknown


class WayblerBaseModel(BaseModel):
    """Base for Waybler payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original vendor payload."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        """Drop ``null`` and NaN values so the field default is used instead."""
        return {
            key: value
            for key, value in values.items()
            if value is not None and not (isinstance(value, float) and math.isnan(value))
        }

    @model_validator(mode="before")
    @classmethod
    def _clean_waybler_values(cls, values: Any) -> Any:
        """Strip null values and stash the original payload in ``raw``."""
        if not isinstance(values, dict):
            return values
        cleaned = WayblerBaseModel._clean_dict(values)
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
