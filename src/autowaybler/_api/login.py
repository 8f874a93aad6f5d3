"""Login endpoint.

Endpoint:
  - POST /app/authenticate/login

The returned JWT is trusted as-is: its payload segment is base64-decoded
to read the user id, and the signature is never checked.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any

from autowaybler._constants import USER_DATA_CLAIM
from autowaybler._transport import Transport
from autowaybler.config import WayblerConfig
from autowaybler.exceptions import WayblerApiError, WayblerAuthenticationError
from autowaybler.models.token import AuthToken

_logger = logging.getLogger(__name__)

_ENDPOINT = "/app/authenticate/login"

#: HTTP statuses the login endpoint uses to reject credentials.
_REJECTED_STATUSES: frozenset[int] = frozenset({400, 401, 403})


def build_login_request(config: WayblerConfig) -> dict[str, str]:
    return {"email": config.username, "password": config.password}


def decode_user_id(token: str) -> str | None:
    """Read the user id claim from the JWT payload segment.

    Returns ``None`` when the token is not a JWT, the payload is not
    JSON, or the claim is absent.
    """
    parts = token.split(".")
    if len(parts) < 2:
        return None
    segment = parts[1]
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    user_id = payload.get(USER_DATA_CLAIM)
    if user_id is None or user_id == "":
        return None
    return str(user_id)


def parse_login_response(response: Any) -> AuthToken:
    """Extract the bearer token and its embedded user id.

    Raises
    ------
    WayblerAuthenticationError
        If the response carries no token or the token has no user id.
    """
    token = response.get("token") if isinstance(response, dict) else None
    if not isinstance(token, str) or not token:
        raise WayblerAuthenticationError("Login response missing token", endpoint=_ENDPOINT)

    user_id = decode_user_id(token)
    if user_id is None:
        raise WayblerAuthenticationError("Could not parse user ID from token.", endpoint=_ENDPOINT)

    return AuthToken(token=token, user_id=user_id)


async def login(config: WayblerConfig, transport: Transport) -> AuthToken:
    """Exchange credentials for an :class:`AuthToken`."""
    try:
        response = await transport.request_json("POST", _ENDPOINT, body=build_login_request(config))
    except WayblerApiError as exc:
        if exc.status_code in _REJECTED_STATUSES:
            raise WayblerAuthenticationError(
                f"Login rejected: HTTP {exc.status_code}",
                status_code=exc.status_code,
                body=exc.body,
                endpoint=_ENDPOINT,
            ) from exc
        raise

    auth = parse_login_response(response)
    _logger.debug("Logged in as user_id=%s", auth.user_id)
    return auth
