"""Push-feed decoding and the websocket runtime."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import aiohttp
from yarl import URL

from autowaybler._redact import redact_url
from autowaybler.config import WayblerConfig
from autowaybler.exceptions import WayblerConnectionError, WayblerParseError

READY_MODEL_TYPE = "WebsocketInitMessage"


@dataclass(frozen=True)
class FeedMessage:
    """A decoded feed message and its ``modelType`` discriminator."""

    model_type: str
    payload: dict[str, Any]


def decode_feed_message(text: str) -> FeedMessage:
    """Parse one text frame.

    Raises
    ------
    WayblerParseError
        If the frame is not a JSON object or has no ``modelType``.
    """
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise WayblerParseError(f"Feed message is not JSON: {text[:64]!r}") from exc
    if not isinstance(parsed, dict):
        raise WayblerParseError("Feed message is not a JSON object")
    model_type = parsed.get("modelType")
    if not isinstance(model_type, str) or not model_type:
        raise WayblerParseError("Feed message has no modelType")
    return FeedMessage(model_type=model_type, payload=parsed)


class WayblerFeed:
    """Websocket runtime that forwards decoded feed messages to a callback.

    The readiness signal (``WebsocketInitMessage``) is handled here and
    consumed once; every other message is passed to *on_message*. A
    message that fails to decode, or whose handler raises, is logged and
    dropped without stopping the listener.
    """

    def __init__(
        self,
        config: WayblerConfig,
        http_session: aiohttp.ClientSession,
        *,
        on_message: Callable[[FeedMessage], None],
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._http = http_session
        self._on_message = on_message
        self._logger = logger or logging.getLogger(__name__)
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._listener: asyncio.Task[None] | None = None
        self._ready: asyncio.Future[None] | None = None
        self._closing = False

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    async def connect(self, token: str) -> None:
        """Open the feed and wait until the vendor signals readiness.

        Raises
        ------
        WayblerConnectionError
            On connection failure, feed error, premature close, or when
            readiness does not arrive within ``feed_ready_timeout``.
        """
        await self.close()
        self._closing = False
        self._ready = asyncio.get_running_loop().create_future()

        params = {"jwt": token, "app-uuid": self._config.app_uuid}
        url = self._config.websocket_url
        self._logger.debug("Feed connecting url=%s", redact_url(URL(url).with_query(params)))
        try:
            self._ws = await self._http.ws_connect(
                url,
                params=params,
                headers={"x-app-uuid": self._config.app_uuid},
            )
        except aiohttp.ClientError as exc:
            raise WayblerConnectionError(f"Feed connection failed: {exc}") from exc

        self._listener = asyncio.create_task(self._listen(self._ws))

        timeout = self._config.feed_ready_timeout
        try:
            await asyncio.wait_for(self._ready, timeout)
        except TimeoutError:
            raise WayblerConnectionError(f"Feed init timeout after {timeout}s") from None
        self._logger.debug("Feed ready")

    async def close(self) -> None:
        """Close the connection and stop the listener. Safe to call repeatedly."""
        self._closing = True
        ws, self._ws = self._ws, None
        listener, self._listener = self._listener, None

        if listener is not None:
            listener.cancel()
            try:
                await listener
            except asyncio.CancelledError:
                pass
            except Exception:
                self._logger.warning("Feed listener ended with an error", exc_info=True)
        if ws is not None and not ws.closed:
            self._logger.debug("Feed disconnect requested")
            await ws.close()
        if self._ready is not None and not self._ready.done():
            self._ready.cancel()

    async def _listen(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._handle_text(msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    self._fail(WayblerConnectionError(f"Feed connection error: {ws.exception()}"))
                    return
                else:
                    self._logger.debug("Ignoring feed frame type=%s", msg.type.name)
        except Exception as exc:
            self._fail(WayblerConnectionError(f"Feed listener failed: {exc!r}"))
            return
        if not self._closing:
            self._fail(WayblerConnectionError("Feed closed unexpectedly"))

    def _handle_text(self, text: str) -> None:
        try:
            message = decode_feed_message(text)
            if message.model_type == READY_MODEL_TYPE:
                if self._ready is not None and not self._ready.done():
                    self._ready.set_result(None)
                return
            self._on_message(message)
        except WayblerParseError:
            self._logger.error("Failed to parse feed message", exc_info=True)
        except Exception:
            self._logger.exception("Feed message handler failed")

    def _fail(self, error: WayblerConnectionError) -> None:
        if self._ready is not None and not self._ready.done():
            self._ready.set_exception(error)
        else:
            self._logger.warning("%s", error)
