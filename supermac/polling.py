"""Bounded wait-until-true loop used after asking the OS to change state."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass
class PollResult:
    succeeded: bool
    attempts: int

    @property
    def timed_out(self) -> bool:
        return not self.succeeded


def wait_for(check: Callable[[], bool], attempts: int, interval: float = 1.0) -> PollResult:
    """Call ``check`` up to ``attempts`` times, sleeping ``interval`` seconds between tries."""
    for attempt in range(1, attempts + 1):
        time.sleep(interval)
        if check():
            logger.debug("Condition met after %d attempt(s)", attempt)
            return PollResult(succeeded=True, attempts=attempt)
        logger.debug("Condition not met, attempt %d/%d", attempt, attempts)
    return PollResult(succeeded=False, attempts=attempts)
