"""Order number allocation.

Order numbers are small increasing integers. Every allocation re-reads the
highest number already stored and hands out the next value under a lock, so
two placements in one process never receive the same number. The lock is
process-local: separate worker processes can still race for one number, and
the loser's insert fails on the primary key.
"""

import threading


class OrderNumberSequence:
    def __init__(self):
        self._last = 0
        self._lock = threading.Lock()

    def next(self, repository) -> int:
        with self._lock:
            self._last = max(self._last, repository.highest_order_id()) + 1
            return self._last

    def reset(self):
        """Forget numbers handed out but never stored."""
        with self._lock:
            self._last = 0


order_numbers = OrderNumberSequence()
