"""HTTP transport for the Waybler REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from autowaybler._redact import redact_for_log
from autowaybler.config import WayblerConfig
from autowaybler.exceptions import WayblerApiError, WayblerConnectionError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Lets tests pass simple doubles while production code uses
    :class:`HttpTransport`.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        body: Mapping[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        ...


class HttpTransport:
    """JSON-over-HTTP transport that adds the app identifier and bearer headers.

    No client-side timeout is applied; the underlying session's defaults
    govern how long a request may block.
    """

    def __init__(self, config: WayblerConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    def _headers(self, *, token: str | None, has_body: bool) -> dict[str, str]:
        headers = {"x-app-uuid": self._config.app_uuid}
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        if has_body:
            headers["Content-Type"] = "application/json; charset=utf-8"
        return headers

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        body: Mapping[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON response body.

        Raises
        ------
        WayblerApiError
            On a non-2xx status or a body that is not JSON.
        WayblerConnectionError
            When the request cannot be sent or the response not read.
        """
        url = f"{self._config.base_url}{endpoint}"
        data = json.dumps(body) if body is not None else None
        headers = self._headers(token=token, has_body=data is not None)

        _logger.debug("%s %s body=%s", method, url, redact_for_log(body))

        try:
            async with self._http.request(method, url, data=data, headers=headers) as resp:
                text = await resp.text()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise WayblerConnectionError(f"Request to {endpoint} failed: {exc}") from exc

        if not 200 <= status < 300:
            raise WayblerApiError(
                f"API error {status} from {endpoint}: {text[:200]}",
                status_code=status,
                body=text,
                endpoint=endpoint,
            )

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise WayblerApiError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                body=text,
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> %s %s", method, endpoint, status, redact_for_log(result))
        return result
