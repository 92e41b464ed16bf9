"""Resume checkpoint for out-of-order completion."""

from __future__ import annotations

import heapq


class ResumeCheckpoint:
    """Tracks the lowest candidate index not yet completed.

    Every index below ``offset`` is finished, so a resumed run may restart
    from ``offset`` without skipping anything.
    """

    def __init__(self, start: int = 0) -> None:
        self._offset = start
        self._pending: list[int] = []

    @property
    def offset(self) -> int:
        return self._offset

    def mark_done(self, index: int) -> None:
        if index < self._offset:
            return
        heapq.heappush(self._pending, index)
        while self._pending and self._pending[0] <= self._offset:
            if heapq.heappop(self._pending) == self._offset:
                self._offset += 1
