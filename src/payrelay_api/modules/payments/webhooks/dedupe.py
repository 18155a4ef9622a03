from __future__ import annotations

from collections import OrderedDict
from threading import Lock


class ProcessedEvents:
    """Bounded, process-local record of webhook deliveries already handled.

    Providers retry deliveries until they get a 2xx, so the same payment can
    arrive more than once, sometimes concurrently. Oldest keys are evicted
    past ``maxsize``.
    """

    def __init__(self, maxsize: int = 1024) -> None:
        self.maxsize = maxsize
        self._seen: OrderedDict[str, None] = OrderedDict()
        self._lock = Lock()

    def seen(self, key: str) -> bool:
        with self._lock:
            return key in self._seen

    def claim(self, key: str) -> bool:
        """Mark ``key`` unless it is already present.

        Returns True for the first caller only. Check and mark happen under
        one lock acquisition, so concurrent deliveries cannot both win.
        """
        with self._lock:
            if key in self._seen:
                return False
            self._mark(key)
            return True

    def release(self, key: str) -> None:
        """Forget ``key`` so a later delivery is processed again."""
        with self._lock:
            self._seen.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._seen.clear()

    def _mark(self, key: str) -> None:
        self._seen[key] = None
        self._seen.move_to_end(key)
        while len(self._seen) > self.maxsize:
            self._seen.popitem(last=False)
