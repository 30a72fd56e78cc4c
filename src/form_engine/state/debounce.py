"""Per-key debouncer: cancel-and-reschedule, last call wins.

At most one pending call exists per key. Scheduling a key that already has a
pending call cancels it and starts a fresh quiet period.
"""

import logging
import threading
from typing import Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class Debouncer:
    """Deferred per-key callbacks backed by ``threading.Timer``.

    A ``delay`` of 0 runs callbacks inline, which keeps tests and batch
    tools synchronous.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._lock = threading.Lock()
        self._pending: Dict[str, Tuple[threading.Timer, Callback]] = {}

    def schedule(self, key: str, callback: Callback) -> None:
        """Run ``callback`` after the quiet period, replacing any pending call for ``key``."""
        if self.delay <= 0:
            self.cancel(key)
            callback()
            return

        timer = threading.Timer(self.delay, self._fire, args=(key,))
        timer.daemon = True
        with self._lock:
            previous = self._pending.get(key)
            if previous is not None:
                previous[0].cancel()
            self._pending[key] = (timer, callback)
        timer.start()

    def _fire(self, key: str) -> None:
        with self._lock:
            entry = self._pending.get(key)
            if entry is None or entry[0] is not threading.current_thread():
                return
            del self._pending[key]
        try:
            entry[1]()
        except Exception:
            logger.exception(f"Debounced callback for '{key}' failed")

    def cancel(self, key: str) -> bool:
        """Drop the pending call for ``key``; True when one was pending."""
        with self._lock:
            entry = self._pending.pop(key, None)
        if entry is None:
            return False
        entry[0].cancel()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        for timer, _ in entries:
            timer.cancel()

    def flush(self) -> int:
        """Run every pending call now, in scheduling order. Returns how many ran."""
        with self._lock:
            entries: List[Tuple[threading.Timer, Callback]] = list(self._pending.values())
            self._pending.clear()
        for timer, callback in entries:
            timer.cancel()
            callback()
        return len(entries)

    @property
    def pending_keys(self) -> List[str]:
        with self._lock:
            return list(self._pending)
