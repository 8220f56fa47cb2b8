from __future__ import annotations

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Check = Callable[[], bool]


def _safe_check(check: Check) -> bool:
    try:
        return bool(check())
    except Exception as e:
        logger.debug("Readiness check raised: %s", e)
        return False


def wait_until_ready(
    check: Check,
    *,
    interval_s: float,
    max_wait_s: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    name: str = "service",
) -> bool:
    """Poll check() every interval_s until it passes or max_wait_s elapses.

    The check runs once immediately and once more at the deadline; it never
    sleeps past the deadline.
    """

    if interval_s <= 0:
        raise ValueError("interval_s must be positive")

    deadline = clock() + max(0.0, max_wait_s)
    attempt = 0
    while True:
        attempt += 1
        if _safe_check(check):
            logger.info("%s ready after %d check(s)", name, attempt)
            return True
        remaining = deadline - clock()
        if remaining <= 0:
            logger.info("%s not ready after %d check(s) (max wait %.0fs)", name, attempt, max_wait_s)
            return False
        sleep(min(interval_s, remaining))


def ensure_ready(
    check: Check,
    *,
    restart: Optional[Callable[[], None]],
    interval_s: float,
    max_wait_s: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    name: str = "service",
) -> bool:
    """Wait for readiness; on timeout restart once and wait again.

    Returns False instead of raising so callers can degrade to a warning.
    """

    if wait_until_ready(check, interval_s=interval_s, max_wait_s=max_wait_s, sleep=sleep, clock=clock, name=name):
        return True
    if restart is None:
        return False

    logger.warning("%s not ready; attempting one restart", name)
    try:
        restart()
    except Exception as e:
        logger.warning("Restart of %s failed: %s", name, e)
        return False
    return wait_until_ready(check, interval_s=interval_s, max_wait_s=max_wait_s, sleep=sleep, clock=clock, name=name)
