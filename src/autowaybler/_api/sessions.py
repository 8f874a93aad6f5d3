"""Charge session endpoint.

Endpoint:
  - PUT /{userId}/sessions/charge

Creates a real charging session on the vendor side. Not idempotent;
callers must not retry.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from autowaybler._redact import redact_for_log
from autowaybler._transport import Transport
from autowaybler.models.session import CreateChargeSessionRequest, CreateChargeSessionResponse
from autowaybler.models.token import AuthToken

_logger = logging.getLogger(__name__)


def charge_session_endpoint(user_id: str) -> str:
    return f"/{user_id}/sessions/charge"


async def create_charge_session(
    transport: Transport,
    auth: AuthToken,
    request: CreateChargeSessionRequest,
) -> CreateChargeSessionResponse:
    """Send the start-charge command and parse the vendor's acknowledgement.

    A 2xx answer means the session was created. A body that does not
    match the expected shape is logged and returned as an empty
    acknowledgement rather than raised.
    """
    endpoint = charge_session_endpoint(auth.user_id)
    _logger.debug(
        "Creating charge session station_id=%s contract_user_id=%s spot_price_limit=%s",
        request.station_id,
        request.contract_user_id,
        request.spot_price_limit,
    )
    response = await transport.request_json("PUT", endpoint, body=request.to_payload(), token=auth.token)
    try:
        return CreateChargeSessionResponse.model_validate(response)
    except ValidationError as exc:
        _logger.warning(
            "Unexpected charge session response from %s: %s body=%s",
            endpoint,
            exc,
            redact_for_log(response),
        )
        return CreateChargeSessionResponse(raw=response if isinstance(response, dict) else {"body": response})
