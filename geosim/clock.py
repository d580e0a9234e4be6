# geosim/clock.py
from __future__ import annotations
import datetime as dt
import logging
from typing import Callable

from .constants import MS_PER_DAY

logger = logging.getLogger(__name__)

EPOCH = dt.date(1970, 1, 1)

def sim_day_from_epoch_ms(ms: float) -> int:
    return int(ms // MS_PER_DAY)

def date_from_sim_day(day: int) -> dt.date:
    return EPOCH + dt.timedelta(days=int(day))

class SimClock:
    """Turns elapsed real seconds into whole simulated-day steps.

    The caller supplies elapsed time, so the clock never reads the wall clock
    and a run is reproducible from the sequence of `tick` calls alone.
    """

    def __init__(self, step: Callable[[int], None], speed: float = 1, start_day: int = 20089):
        self._step = step
        self.speed = 0.0
        self.day = int(start_day)
        self._carry = 0.0
        self.set_speed(speed)

    def set_speed(self, speed: float) -> None:
        try:
            speed = float(speed)
        except (TypeError, ValueError):
            speed = 0.0
        self.speed = max(0.0, speed)
        logger.debug("clock speed set to %g days/s", self.speed)

    @property
    def paused(self) -> bool:
        return self.speed <= 0

    def pause(self) -> None:
        self.set_speed(0)

    def tick(self, elapsed_seconds: float) -> int:
        """Accumulate elapsed time; step whole days. Returns days stepped."""
        if self.paused or elapsed_seconds <= 0:
            return 0
        self._carry += elapsed_seconds * self.speed
        days = int(self._carry)
        if days <= 0:
            return 0
        self._carry -= days
        self.day += days
        self._step(days)
        return days

    @property
    def date(self) -> dt.date:
        return date_from_sim_day(self.day)
