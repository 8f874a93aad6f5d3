"""Cron-driven trigger for charge evaluation cycles."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from croniter import croniter

from autowaybler.charge import ChargeOutcome, run_charge_cycle
from autowaybler.config import ChargeConfig

_logger = logging.getLogger(__name__)


class ChargeScheduler:
    """Runs a charge cycle at every time matched by the configured cron expression.

    Fire times are computed in ``config.time_zone``. Cycles never overlap:
    a fire time that passes while a cycle is running is skipped. A failed
    cycle is logged once and the scheduler waits for the next tick.
    """

    def __init__(
        self,
        config: ChargeConfig,
        *,
        job: Callable[[ChargeConfig], Awaitable[ChargeOutcome]] = run_charge_cycle,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._job = job
        self._tz = config.tzinfo
        self._clock = clock or (lambda: datetime.now(self._tz))
        self._stopped = asyncio.Event()
        self._current: asyncio.Task[ChargeOutcome] | None = None

    @property
    def is_stopped(self) -> bool:
        return self._stopped.is_set()

    def next_run(self, after: datetime) -> datetime:
        """Next fire time strictly after *after*, in the configured time zone."""
        start = after.astimezone(self._tz)
        nxt: datetime = croniter(self._config.cron_expression, start).get_next(datetime)
        return nxt

    async def run_once(self) -> ChargeOutcome | None:
        """Run one cycle. Returns ``None`` if it failed or was abandoned."""
        self._current = asyncio.create_task(self._job(self._config))
        try:
            return await self._current
        except asyncio.CancelledError:
            if not self._stopped.is_set():
                raise
            _logger.warning("Charge cycle abandoned on shutdown")
            return None
        except Exception:
            _logger.exception("Charging failed")
            return None
        finally:
            self._current = None

    async def run_forever(self) -> None:
        _logger.info(
            'Scheduler started: cron="%s", tz=%s, lookAhead=%sh, maxSpotPrice=%s',
            self._config.cron_expression,
            self._config.time_zone,
            self._config.look_ahead_hours,
            self._config.max_spot_price,
        )
        while not self._stopped.is_set():
            now = self._clock()
            fire_at = self.next_run(now)
            delay = max(0.0, (fire_at - now).total_seconds())
            _logger.debug("Next charge cycle at %s", fire_at.isoformat())
            try:
                await asyncio.wait_for(self._stopped.wait(), delay)
            except TimeoutError:
                await self.run_once()
        _logger.info("Scheduler stopped")

    def stop(self) -> None:
        """Stop the loop and abandon any in-flight cycle."""
        self._stopped.set()
        if self._current is not None and not self._current.done():
            self._current.cancel()
