"""
Request counters exposed on the status endpoint.
"""

import threading
from collections import Counter
from datetime import datetime, timezone
from typing import Any


class RequestMetrics:
    """Counts handled requests by status code and method."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.requests = 0
        self.status: Counter[int] = Counter()
        self.methods: Counter[str] = Counter()
        self.start = datetime.now(timezone.utc)

    def record(self, method: str, status: int) -> None:
        """Count one handled request."""
        with self._lock:
            self.requests += 1
            self.status[status] += 1
            self.methods[method] += 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        with self._lock:
            return {
                "requests": self.requests,
                "status": {str(code): count for code, count in sorted(self.status.items())},
                "methods": dict(sorted(self.methods.items())),
                "start": self.start.isoformat(),
            }
