"""Internal constants shared across the library."""

BASE_URL = "https://api.waybler.com/v7"
WEBSOCKET_URL = "wss://api.waybler.com/v7/app/websocket"
APP_UUID = "8d0a2cfa-4373-43e2-951a-8bff7c25d4d7"

#: JWT payload claim carrying the vendor user id.
USER_DATA_CLAIM = "http://schemas.microsoft.com/ws/2008/06/identity/claims/userdata"

FEED_READY_TIMEOUT: float = 30.0

# ------------------------------------------------------------------
# Scheduling defaults
# ------------------------------------------------------------------

DEFAULT_CRON = "0 17-23 * * *"
DEFAULT_TIME_ZONE = "Europe/Stockholm"
DEFAULT_LOOK_AHEAD_HOURS = 14.0
MAX_LOOK_AHEAD_HOURS = 24.0
DEFAULT_MAX_SPOT_PRICE = 1.5
