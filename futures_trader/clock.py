import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockOffset:
    serverTimestamp: int
    localTimestamp: int
    thresholdMs: int = 50

    @property
    def offsetMs(self):
        return self.serverTimestamp - self.localTimestamp

    @property
    def healthy(self):
        return abs(self.offsetMs) < self.thresholdMs


def nowMs():
    return int(time.time() * 1000)


def checkClockOffset(result, localTimestamp, thresholdMs=50, log=None):
    """
    Grades local-vs-server skew from a getServerTime() result.

    Advisory only: the offset is logged, never used to block trading.
    Returns a ClockOffset, or None if the server time call failed.
    """
    log = log or logger

    if not result.success:
        log.error(f"Server time fail: {result.error}")
        return None

    offset = ClockOffset(int(result.data), int(localTimestamp), thresholdMs)
    serverTime = datetime.fromtimestamp(offset.serverTimestamp / 1000, tz=timezone.utc)

    if offset.healthy:
        log.info(f"Connected! Server: {serverTime:%Y-%m-%d %H:%M:%S} UTC | Offset: {offset.offsetMs}ms (green)")
    else:
        log.warning(f"Clock skew! Server: {serverTime:%Y-%m-%d %H:%M:%S} UTC | Offset: {offset.offsetMs}ms exceeds {thresholdMs}ms")
    return offset
