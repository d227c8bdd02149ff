from __future__ import annotations

import threading
import time

CHANNELS = ("telegram", "slack", "sheets")

class Metrics:
    """In-process counters for the webhook pipeline, reset on restart."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.started_at = time.monotonic()
            self._sessions = {"processed": 0, "duplicates": 0}
            self._deliveries = {c: {"sent": 0, "failed": 0, "skipped": 0} for c in CHANNELS}

    def session_processed(self) -> None:
        with self._lock:
            self._sessions["processed"] += 1

    def session_duplicate(self) -> None:
        with self._lock:
            self._sessions["duplicates"] += 1

    # outcome is one of sent / failed / skipped
    def delivery(self, channel: str, outcome: str) -> None:
        with self._lock:
            self._deliveries[channel][outcome] += 1

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "uptime_seconds": round(time.monotonic() - self.started_at, 3),
                "sessions": dict(self._sessions),
                "deliveries": {c: dict(v) for c, v in self._deliveries.items()},
            }

metrics = Metrics()

def get_metrics() -> Metrics:
    return metrics
