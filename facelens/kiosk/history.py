import threading
from collections import deque
from typing import List

from facelens.models import HistoryEntry


class ResultHistory:
    """Most recent check-ins, newest first, capped at a fixed capacity"""

    def __init__(self, capacity: int = 10):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._entries = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def add(self, entry: HistoryEntry):
        # appendleft on a full deque drops the oldest entry from the right
        with self._lock:
            self._entries.appendleft(entry)

    def entries(self) -> List[HistoryEntry]:
        with self._lock:
            return list(self._entries)

    def latest(self):
        with self._lock:
            return self._entries[0] if self._entries else None

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
