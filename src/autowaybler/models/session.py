"""Charge session write command and its acknowledgement."""

from __future__ import annotations

from typing import Literal

from autowaybler.models._base import WayblerBaseModel


class CreateChargeSessionRequest(WayblerBaseModel):
    """Body of ``PUT /{userId}/sessions/charge``.

    ``spot_price_limit`` is the pre-VAT price ceiling for the session.
    """

    model_type: Literal["CreateChargeSessionRequest"] = "CreateChargeSessionRequest"
    station_id: int
    contract_user_id: int
    spot_price_limit: float

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class CreateChargeSessionResponse(WayblerBaseModel):
    """Acknowledgement of a created session.

    The session already exists once the vendor answers 2xx, so every
    field is optional and an unexpected body never fails the command.
    """

    session_id: int | str | None = None
    result: str | None = None
    contract_user_id: int | str | None = None
