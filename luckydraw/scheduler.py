import logging
import threading

logger = logging.getLogger(__name__)


class RepeatingTask:
    """Calls `callback` every `interval` seconds on a daemon thread until stopped.

    `stop()` blocks until a tick already running has finished, and no tick
    starts after it returns.
    """

    def __init__(self, interval, callback):
        self.interval = interval
        self._callback = callback
        self._lock = threading.RLock()
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    @property
    def running(self):
        return self._thread.is_alive() and not self._cancelled.is_set()

    def start(self):
        self._thread.start()
        return self

    def _run(self):
        while not self._cancelled.wait(self.interval):
            with self._lock:
                # stop() may have won the race for the lock
                if self._cancelled.is_set():
                    return
                try:
                    self._callback()
                except Exception:
                    logger.exception("Repeating task callback failed, stopping")
                    self._cancelled.set()
                    return

    def stop(self):
        self._cancelled.set()
        with self._lock:
            pass


class ThreadScheduler:
    def call_every(self, interval, callback):
        return RepeatingTask(interval, callback).start()
