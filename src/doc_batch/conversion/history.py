import threading
from collections import deque

from .models import HistoryEntry

HISTORY_CAPACITY = 100


class HistoryLog:
    """Bounded record of recent batches; the oldest entry is evicted first."""

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        self._entries: deque[HistoryEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(self, entry: HistoryEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def recent(self) -> list[HistoryEntry]:
        """Entries newest first."""
        with self._lock:
            return list(reversed(self._entries))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
