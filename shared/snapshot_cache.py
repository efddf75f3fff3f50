"""
Market Snapshot Cache.
In-memory token -> latest PriceData mapping shared between the data
collector (single writer) and request handlers (many readers).
"""
import threading
from contextlib import contextmanager
from typing import Dict, Optional

from .data_providers.interfaces import PriceData


class ReadWriteLock:
    """Many concurrent readers or one writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MarketSnapshotCache:
    """
    Latest price snapshot per token.

    Each put replaces one token's record as a whole, so readers never see
    a partially updated record. Reads across tokens are not grouped; a
    reader may see tokens from two different refresh cycles.
    """

    def __init__(self):
        self._lock = ReadWriteLock()
        self._snapshots: Dict[str, PriceData] = {}

    def put(self, snapshot: PriceData):
        with self._lock.write():
            self._snapshots[snapshot.symbol] = snapshot

    def get(self, symbol: str) -> Optional[PriceData]:
        with self._lock.read():
            return self._snapshots.get(symbol)

    def get_all(self) -> Dict[str, PriceData]:
        """Copy of the current mapping."""
        with self._lock.read():
            return dict(self._snapshots)

    def clear(self):
        with self._lock.write():
            self._snapshots.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._snapshots)
