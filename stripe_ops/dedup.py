from __future__ import annotations

import threading

class SeenSet:
    """Ids of checkout sessions already fanned out by this process.

    Lives only as long as the process: no eviction, nothing written to disk.
    A restart followed by a Stripe redelivery will notify again.
    """

    def __init__(self) -> None:
        self._ids: set[str] = set()
        self._lock = threading.Lock()

    def was_handled(self, id: str) -> bool:
        with self._lock:
            return id in self._ids

    def mark_handled(self, id: str) -> None:
        with self._lock:
            self._ids.add(id)

    def reset(self) -> None:
        with self._lock:
            self._ids.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

seen_sessions = SeenSet()

def get_seen_set() -> SeenSet:
    return seen_sessions
