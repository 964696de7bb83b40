"""Exchange-local clock with a host-time fallback."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from stockpulse.utils.constants import EXCHANGE_TIMEZONE

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _host_local(reading: datetime) -> datetime:
    """Express an aware *reading* in the host's zone; naive readings pass through."""
    if reading.tzinfo is None:
        return reading
    return reading.astimezone()


class SessionClock:
    """Reads "now" in the exchange's timezone, independent of the host's zone.

    ``source`` returns the current instant and defaults to the system clock.
    Naive readings from the source are treated as exchange-local. If the zone
    cannot be loaded or the conversion fails, the raw source reading is
    returned in the host's local zone and the clock is marked degraded.
    """

    def __init__(
        self,
        timezone: str = EXCHANGE_TIMEZONE,
        source: Callable[[], datetime] | None = None,
    ) -> None:
        self._timezone_name = timezone
        self._source = source or _utc_now
        self._degraded = False

    @property
    def timezone_name(self) -> str:
        return self._timezone_name

    @property
    def degraded(self) -> bool:
        return self._degraded

    def now(self) -> datetime:
        reading = self._source()
        try:
            zone = ZoneInfo(self._timezone_name)
            if reading.tzinfo is None:
                local = reading.replace(tzinfo=zone)
            else:
                local = reading.astimezone(zone)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            if not self._degraded:
                logger.warning(
                    "Cannot convert to %s (%s); using host time", self._timezone_name, exc
                )
            self._degraded = True
            return _host_local(reading)

        if self._degraded:
            logger.info("Exchange timezone %s available again", self._timezone_name)
        self._degraded = False
        return local
