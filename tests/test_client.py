"""End-to-end client tests against an in-process fake vendor."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import UTC, datetime, timedelta

import aiohttp
import pytest

from autowaybler._feed import FeedMessage, WayblerFeed, decode_feed_message
from autowaybler.client import WayblerClient
from autowaybler.exceptions import (
    WayblerApiError,
    WayblerAuthenticationError,
    WayblerConnectionError,
    WayblerParseError,
)
from vendor_fake import USER_ID, FakeVendor, make_jwt, serve_vendor, zone_payload


def _soon(hours: float) -> datetime:
    return datetime.now(UTC) + timedelta(hours=hours)


# ------------------------------------------------------------------
# Message decoding
# ------------------------------------------------------------------


def test_decode_feed_message_reads_discriminator() -> None:
    message = decode_feed_message(json.dumps({"modelType": "ChargeZoneModel", "zoneId": 1}))
    assert message.model_type == "ChargeZoneModel"
    assert message.payload["zoneId"] == 1


@pytest.mark.parametrize(
    "text",
    ["not json", "[1, 2]", '{"zoneId": 1}', '{"modelType": ""}', "[" * 200_000 + "]" * 200_000],
    ids=["not-json", "array", "no-model-type", "empty-model-type", "deeply-nested"],
)
def test_decode_feed_message_rejects_malformed(text: str) -> None:
    with pytest.raises(WayblerParseError):
        decode_feed_message(text)


# ------------------------------------------------------------------
# initialize()
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_initialize_populates_snapshot_before_ready() -> None:
    vendor = FakeVendor(feed_messages=[zone_payload(1, states=("EvConnected",))])

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()

            assert client.is_vehicle_connected()
            assert not client.is_charging()

    assert vendor.login_requests == [{"email": "driver@example.com", "password": "hunter2"}]
    assert vendor.login_headers[0]["x-app-uuid"] == config.app_uuid
    assert "authorization" not in vendor.login_headers[0]
    assert vendor.feed_query == {"jwt": vendor.token, "app-uuid": config.app_uuid}


@pytest.mark.asyncio
async def test_later_zone_message_wins() -> None:
    vendor = FakeVendor(
        feed_messages=[
            zone_payload(1, states=("EvConnected",)),
            zone_payload(1, states=("Busy",)),
        ]
    )

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            assert len(client.store) == 1
            assert client.is_charging()


@pytest.mark.asyncio
async def test_malformed_and_unknown_messages_are_ignored(caplog: pytest.LogCaptureFixture) -> None:
    vendor = FakeVendor(
        feed_messages=[
            "definitely not json",
            {"modelType": "ChargePointStatusModel", "foo": 1},
            {"modelType": "ChargeZoneModel", "zoneId": "not-a-number"},
            {"noDiscriminator": True},
            zone_payload(2, states=("Ok",)),
        ]
    )

    with caplog.at_level(logging.DEBUG):
        async with serve_vendor(vendor) as config:
            async with WayblerClient(config) as client:
                await client.initialize()
                assert [zone.zone_id for zone in client.store.zones] == [2]

    assert "Failed to parse feed message" in caplog.text
    assert "Ignoring feed message modelType=ChargePointStatusModel" in caplog.text


@pytest.mark.asyncio
async def test_zone_with_null_names_is_applied() -> None:
    zone = zone_payload(1, states=("EvConnected",))
    zone["name"] = None
    zone["currency"] = None
    zone["stationGroups"][0]["stations"][0]["name"] = None
    vendor = FakeVendor(feed_messages=[zone])

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            assert client.is_vehicle_connected()


@pytest.mark.asyncio
async def test_deeply_nested_frame_is_dropped_and_feed_keeps_running(caplog: pytest.LogCaptureFixture) -> None:
    depth = 200_000
    vendor = FakeVendor(feed_messages=["[" * depth + "]" * depth, zone_payload(1, states=("EvConnected",))])

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            assert client.is_vehicle_connected()

    assert "Failed to parse feed message" in caplog.text


@pytest.mark.asyncio
async def test_binary_frames_are_ignored(caplog: pytest.LogCaptureFixture) -> None:
    vendor = FakeVendor(feed_messages=[b"\x00\x01", zone_payload(1, states=("Busy",))])

    with caplog.at_level(logging.DEBUG):
        async with serve_vendor(vendor) as config:
            async with WayblerClient(config) as client:
                await client.initialize()
                assert client.is_charging()

    assert "Ignoring feed frame type=BINARY" in caplog.text


@pytest.mark.asyncio
async def test_handler_error_is_logged_and_close_still_succeeds(caplog: pytest.LogCaptureFixture) -> None:
    received: list[str] = []

    def explode(message: FeedMessage) -> None:
        received.append(message.model_type)
        raise RuntimeError("handler bug")

    vendor = FakeVendor(feed_messages=[zone_payload(1), zone_payload(2)])

    async with serve_vendor(vendor) as config:
        async with aiohttp.ClientSession() as session:
            feed = WayblerFeed(config, session, on_message=explode)
            await feed.connect(vendor.token)
            assert feed.is_connected
            await feed.close()
            await asyncio.wait_for(vendor.feed_closed.wait(), 2)
            assert not feed.is_connected

    assert received == ["ChargeZoneModel", "ChargeZoneModel"]
    assert "Feed message handler failed" in caplog.text


@pytest.mark.asyncio
async def test_rejected_credentials_raise_authentication_error() -> None:
    vendor = FakeVendor(login_status=401)

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            with pytest.raises(WayblerAuthenticationError) as exc_info:
                await client.initialize()

    assert exc_info.value.status_code == 401
    assert exc_info.value.body == "invalid credentials"


@pytest.mark.asyncio
async def test_token_without_user_id_raises_authentication_error() -> None:
    vendor = FakeVendor(token=make_jwt({"sub": "someone"}))

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            with pytest.raises(WayblerAuthenticationError, match="user ID"):
                await client.initialize()


@pytest.mark.asyncio
async def test_missing_ready_signal_times_out() -> None:
    vendor = FakeVendor(send_ready=False, feed_messages=[zone_payload(1)])

    async with serve_vendor(vendor, feed_ready_timeout=0.2) as config:
        async with WayblerClient(config) as client:
            with pytest.raises(WayblerConnectionError, match="timeout"):
                await client.initialize()
        await asyncio.wait_for(vendor.feed_closed.wait(), 2)


@pytest.mark.asyncio
async def test_feed_closed_before_ready_raises_connection_error() -> None:
    vendor = FakeVendor(send_ready=False, close_feed_early=True)

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            with pytest.raises(WayblerConnectionError, match="closed unexpectedly"):
                await client.initialize()


@pytest.mark.asyncio
async def test_feed_close_after_ready_is_not_fatal() -> None:
    vendor = FakeVendor(close_feed_early=True, feed_messages=[zone_payload(1)])

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            await asyncio.wait_for(vendor.feed_closed.wait(), 2)
            assert client.is_vehicle_connected()


# ------------------------------------------------------------------
# Queries and write command
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_lowest_price_within_window() -> None:
    vendor = FakeVendor(
        feed_messages=[zone_payload(1, prices=[(_soon(1), 2.0, 1.6), (_soon(5), 1.2, 0.96), (_soon(20), 0.5, 0.4)])]
    )

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            lowest = client.get_lowest_price(14)
            nothing = client.get_lowest_price(0.5)

    assert lowest is not None
    assert lowest.consumption_fee.total == 1.2
    assert nothing is None


@pytest.mark.asyncio
async def test_start_charging_targets_first_connected_station() -> None:
    vendor = FakeVendor(
        feed_messages=[
            zone_payload(1, states=("Ok",), contract_user_id=11),
            zone_payload(2, states=("Busy", "EvConnected"), contract_user_id=22),
        ]
    )

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            result = await client.start_charging(0.96)

    assert result is not None
    assert result.session_id == 9001
    assert vendor.charge_requests == [
        {
            "user_id": USER_ID,
            "modelType": "CreateChargeSessionRequest",
            "stationId": 202,
            "contractUserId": 22,
            "spotPriceLimit": 0.96,
        }
    ]
    headers = vendor.charge_headers[0]
    assert headers["authorization"] == f"Bearer {vendor.token}"
    assert headers["x-app-uuid"] == config.app_uuid
    assert headers["content-type"].startswith("application/json")


@pytest.mark.asyncio
async def test_start_charging_without_eligible_station_returns_none() -> None:
    vendor = FakeVendor(feed_messages=[zone_payload(1, states=("Busy", "Ok"))])

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            assert await client.start_charging(1.0) is None

    assert vendor.charge_requests == []


@pytest.mark.asyncio
async def test_start_charging_non_2xx_surfaces_api_error() -> None:
    vendor = FakeVendor(charge_status=409, feed_messages=[zone_payload(1)])

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            with pytest.raises(WayblerApiError) as exc_info:
                await client.start_charging(1.0)

    assert exc_info.value.status_code == 409
    assert exc_info.value.body == "station offline"
    assert exc_info.value.endpoint == f"/{USER_ID}/sessions/charge"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "session_id"),
    [
        ({"modelType": "CreateChargeSessionResponse", "result": "Ok"}, None),
        ({"result": "Ok", "sessionId": "abc-123"}, "abc-123"),
        ({"result": 5, "sessionId": 9001}, None),
        ([], None),
    ],
)
async def test_start_charging_odd_acknowledgement_still_returns_session(body: object, session_id: object) -> None:
    vendor = FakeVendor(charge_response=body, feed_messages=[zone_payload(1)])

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            result = await client.start_charging(1.0)

    assert result is not None
    assert result.session_id == session_id
    assert len(vendor.charge_requests) == 1


# ------------------------------------------------------------------
# disconnect()
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_disconnect_is_idempotent_and_closes_feed() -> None:
    vendor = FakeVendor(feed_messages=[zone_payload(1)])

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.initialize()
            await client.disconnect()
            await client.disconnect()
            await asyncio.wait_for(vendor.feed_closed.wait(), 2)
        await client.disconnect()


@pytest.mark.asyncio
async def test_disconnect_before_initialize_is_noop() -> None:
    vendor = FakeVendor()

    async with serve_vendor(vendor) as config:
        async with WayblerClient(config) as client:
            await client.disconnect()

    assert vendor.login_requests == []
