# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Wait for the backend to report healthy, bounded by a deadline.
"""

import logging
import time
from typing import Callable, Optional

from ..collaborators.base import HealthCheck
from ..errors import ReadinessTimeout

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE = 600.0
DEFAULT_INTERVAL = 5.0


class ReadinessWaiter:
    """Polls a health collaborator at a fixed interval."""

    def __init__(
        self,
        health: HealthCheck,
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.health = health
        self.interval = interval
        self._clock = clock
        self._sleep = sleep

    def check_once(self, timeout: Optional[float] = None) -> bool:
        """Single health check; collaborator errors count as unhealthy."""
        try:
            return bool(self.health.check_healthy(timeout=timeout))
        except Exception as e:
            logger.debug(f"Health check raised: {e}")
            return False

    def wait_healthy(self, deadline: float = DEFAULT_DEADLINE) -> int:
        """
        Block until the backend is healthy.

        Every check gets what is left of the deadline as its own timeout, and
        no check starts once the deadline is reached.

        Args:
            deadline: Seconds to keep polling before giving up

        Returns:
            Number of health checks performed

        Raises:
            ReadinessTimeout: deadline elapsed without a healthy answer
        """
        start = self._clock()
        attempts = 0
        remaining = deadline

        while remaining > 0:
            attempts += 1
            if self.check_once(timeout=remaining):
                logger.info(f"Backend healthy after {attempts} check(s)")
                return attempts

            remaining = deadline - (self._clock() - start)
            if remaining <= 0:
                break

            logger.debug(f"Backend not healthy yet, {remaining:.0f}s left")
            self._sleep(min(self.interval, remaining))
            remaining = deadline - (self._clock() - start)

        raise ReadinessTimeout(deadline, attempts)
