"""Time-ordered, prefixed string IDs for entries, settlements, parties and alerts.

Format: "<prefix>_<n>" where n packs
  - milliseconds since 2024-01-01 UTC (upper bits)
  - a 10-bit node id
  - a 12-bit per-millisecond counter
so IDs created by one process sort by creation time.
"""

import threading
import time

_EPOCH_MS = 1_704_067_200_000
_NODE_BITS = 10
_COUNTER_BITS = 12
_COUNTER_MASK = (1 << _COUNTER_BITS) - 1


class IdGenerator:
    def __init__(self, node_id: int = 0) -> None:
        if not 0 <= node_id < (1 << _NODE_BITS):
            raise ValueError(f"node_id must be in [0, {(1 << _NODE_BITS) - 1}]")
        self._node_id = node_id
        self._counter = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            now_ms = time.time_ns() // 1_000_000
            if now_ms < self._last_ms:
                # Clock stepped backwards; keep issuing from the last seen millisecond.
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._counter = (self._counter + 1) & _COUNTER_MASK
                if self._counter == 0:
                    while now_ms <= self._last_ms:
                        now_ms = time.time_ns() // 1_000_000
            else:
                self._counter = 0
            self._last_ms = now_ms
            return (
                ((now_ms - _EPOCH_MS) << (_NODE_BITS + _COUNTER_BITS))
                | (self._node_id << _COUNTER_BITS)
                | self._counter
            )

    def new_id(self, prefix: str) -> str:
        return f"{prefix}_{self.next_int()}"


_generator = IdGenerator()


def new_id(prefix: str) -> str:
    """e.g. new_id("ent") -> "ent_1839201938120704"."""
    return _generator.new_id(prefix)
