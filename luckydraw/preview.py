"""Rolling name preview shown while a draw is in progress."""

import logging
import threading

from . import config
from .draw_engine import check_count, draw
from .errors import ValidationError
from .scheduler import ThreadScheduler

logger = logging.getLogger(__name__)


def rolling_interval(speed):
    try:
        return config.ROLLING_INTERVALS[speed]
    except KeyError:
        raise ValidationError(
            f"Unknown rolling speed '{speed}', expected one of: {', '.join(config.ROLLING_INTERVALS)}."
        ) from None


class RollingPreview:
    """Re-samples the displayed names at the speed's interval until stopped.

    Every sample, including the first, is a full `draw(pool, count)` call, so
    whatever is on screen when the operator stops is a legitimate result for
    the same pool.
    """

    def __init__(self, pool, count, speed=config.DEFAULT_ROLLING_SPEED, scheduler=None, rng=None):
        check_count(pool, count)
        self.pool = list(pool)
        self.count = count
        self.interval = rolling_interval(speed)
        self._scheduler = scheduler or ThreadScheduler()
        self._rng = rng
        self._lock = threading.Lock()
        self._current = []
        self._task = None
        self._stopped = False

    @property
    def current(self):
        with self._lock:
            return list(self._current)

    @property
    def rolling(self):
        return self._task is not None and not self._stopped

    def _tick(self):
        names = draw(self.pool, self.count, self._rng)
        with self._lock:
            self._current = names

    def start(self):
        if self._task is not None:
            raise RuntimeError("preview already started")
        self._tick()
        self._task = self._scheduler.call_every(self.interval, self._tick)
        logger.info("Rolling preview started: %d name(s) from a pool of %d every %.0f ms",
                    self.count, len(self.pool), self.interval * 1000)
        return self.current

    def stop(self):
        """Cancel the re-sampling and return the names left on screen."""
        if self._task is not None and not self._stopped:
            self._task.stop()
        self._stopped = True
        return self.current
